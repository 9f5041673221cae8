"""
Transform raw Asana tasks into normalized tasks with Pydantic validation.

Category, quantity and tool live in project custom fields whose names vary
between workspaces, so they are located with an ordered list of field rules
(name predicates plus a value extractor) rather than fixed keys.
"""

from dataclasses import dataclass, field
from pydantic import ValidationError
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from datetime import date, datetime
from core.exceptions import NormalizationError
from core.points import CategoryPointTable
from models.base import TaskStatus
from schemas.task import TaskCreate
import logging

logger = logging.getLogger(__name__)


def label_value(custom_field: Dict[str, Any]) -> Optional[str]:
    """Enum label, falling back to the display string."""
    enum_value = custom_field.get("enum_value") or {}
    label = enum_value.get("name") if isinstance(enum_value, dict) else None
    if label and str(label).strip():
        return str(label).strip()
    display = custom_field.get("display_value")
    if display is not None and str(display).strip():
        return str(display).strip()
    return None


def number_value(custom_field: Dict[str, Any]) -> Optional[int]:
    """Numeric value as an int, or None when absent or not numeric."""
    value = custom_field.get("number_value")
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return None


@dataclass(frozen=True)
class FieldRule:
    """
    Locates one derived value among a task's custom fields.

    A field matches when its lower-cased name contains any of ``contains``
    or equals any of ``equals``. The first matching field in field order
    wins, and ``extract`` turns it into a value.
    """
    target: str
    extract: Callable[[Dict[str, Any]], Any]
    contains: Tuple[str, ...] = field(default_factory=tuple)
    equals: Tuple[str, ...] = field(default_factory=tuple)

    def matches(self, field_name: Optional[str]) -> bool:
        name = (field_name or "").strip().lower()
        if not name:
            return False
        return name in self.equals or any(fragment in name for fragment in self.contains)

    def find(self, custom_fields: Sequence[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        for custom_field in custom_fields:
            if isinstance(custom_field, dict) and self.matches(custom_field.get("name")):
                return custom_field
        return None

    def apply(self, custom_fields: Sequence[Dict[str, Any]]) -> Any:
        matched = self.find(custom_fields)
        if matched is None:
            return None
        return self.extract(matched)


CATEGORY_RULE = FieldRule(target="category", extract=label_value, contains=("video type", "videotype"), equals=("type",))
QUANTITY_RULE = FieldRule(target="quantity", extract=number_value, contains=("quantity", "count"), equals=("qty",))
TOOL_RULE = FieldRule(target="tool", extract=label_value, contains=("creative tool",), equals=("ctst",))

DEFAULT_RULES: Tuple[FieldRule, ...] = (CATEGORY_RULE, QUANTITY_RULE, TOOL_RULE)

# Column widths of the task table
MAX_NAME_LENGTH = 1024
MAX_CATEGORY_LENGTH = 50
MAX_TOOL_LENGTH = 200
MAX_ASSIGNEE_NAME_LENGTH = 200
MAX_EMAIL_LENGTH = 320


def fitted(value: Any, limit: int) -> Optional[str]:
    """String value, or None when it is empty or wider than ``limit``."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or len(value) > limit:
        return None
    return value


class TaskNormalizer:
    """
    Normalize raw Asana tasks into the task schema.

    Handles:
    - Custom field matching (category, quantity, tool)
    - Point computation from the category point table
    - Tolerant parsing of timestamps and dates
    - Null coalescing of optional passthrough fields
    """

    def __init__(
        self,
        point_table: Optional[CategoryPointTable] = None,
        rules: Sequence[FieldRule] = DEFAULT_RULES
    ):
        self.point_table = point_table or CategoryPointTable()
        self.rules = tuple(rules)

    def derive(self, custom_fields: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
        """Run every rule over the custom fields; later rules never override earlier targets."""
        derived: Dict[str, Any] = {}
        for rule in self.rules:
            if rule.target in derived and derived[rule.target] is not None:
                continue
            derived[rule.target] = rule.apply(custom_fields)
        return derived

    def normalize(self, raw: Dict[str, Any]) -> TaskCreate:
        """
        Normalize one raw task.

        Returns:
            Validated TaskCreate model

        Sub-fields of the wrong shape or too wide for their column degrade
        to their default (null, quantity 1, zero points); the task is kept.

        Raises:
            NormalizationError: When the record is not an object or has no
                external id to key on
        """
        if not isinstance(raw, dict):
            raise NormalizationError(
                "Task record is not an object",
                context={"record_type": type(raw).__name__}
            )

        external_id = raw.get("gid")
        if external_id is None or not str(external_id).strip():
            raise NormalizationError(
                "Task has no gid",
                context={"field_name": "gid", "task_name": raw.get("name")}
            )

        custom_fields = raw.get("custom_fields")
        if not isinstance(custom_fields, list):
            custom_fields = []
        derived = self.derive(custom_fields)

        category = fitted(derived.get("category"), MAX_CATEGORY_LENGTH)
        if category in self.point_table:
            category = self.point_table.canonical(category)
        elif category:
            logger.debug(f"Task {external_id}: category {category!r} has no point weight, scoring 0")

        quantity = max(1, derived.get("quantity") or 1)
        points = self.point_table.points_for(category, quantity)

        assignee = raw.get("assignee")
        if not isinstance(assignee, dict):
            assignee = {}

        tags = raw.get("tags")
        if not isinstance(tags, list):
            tags = []

        try:
            return TaskCreate(
                external_id=str(external_id),
                name=str(raw.get("name") or "")[:MAX_NAME_LENGTH],
                description=raw.get("notes") or None,
                assignee_name=fitted(assignee.get("name"), MAX_ASSIGNEE_NAME_LENGTH),
                assignee_email=fitted(assignee.get("email"), MAX_EMAIL_LENGTH),
                status=TaskStatus.DONE if raw.get("completed") else TaskStatus.NOT_DONE,
                completed_at=self._parse_datetime(raw.get("completed_at")),
                due_date=self._parse_date(raw.get("due_on")),
                category=category,
                quantity=quantity,
                points=points,
                tool=fitted(derived.get("tool"), MAX_TOOL_LENGTH),
                tags=[t.get("name") for t in tags if isinstance(t, dict)],
                raw_payload=raw,
            )
        except ValidationError as e:
            raise NormalizationError(
                f"Task {external_id} failed validation",
                context={"external_id": str(external_id)},
                original_exception=e
            )

    def normalize_many(self, records: Sequence[Dict[str, Any]]) -> Tuple[List[TaskCreate], int]:
        """
        Normalize a batch; a record that fails for any reason is skipped.

        Returns:
            (normalized tasks, number of skipped records)
        """
        normalized = []
        skipped = 0
        for raw in records:
            try:
                normalized.append(self.normalize(raw))
            except NormalizationError as e:
                skipped += 1
                logger.error(f"Skipping task: {e.message}", extra={"error_context": e.to_dict()})
            except Exception as e:
                skipped += 1
                gid = raw.get("gid") if isinstance(raw, dict) else None
                logger.error(
                    f"Skipping task {gid}: unexpected {type(e).__name__}: {e}",
                    extra={"error_context": {"external_id": gid, "error_type": type(e).__name__}}
                )
        return normalized, skipped

    @staticmethod
    def _parse_datetime(value: Any) -> Optional[datetime]:
        """Safely parse an ISO timestamp"""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value
        try:
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None

    @staticmethod
    def _parse_date(value: Any) -> Optional[date]:
        """Safely parse an ISO date"""
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return date.fromisoformat(str(value)[:10])
        except ValueError:
            return None
