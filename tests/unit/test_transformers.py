"""
Unit tests for task normalization
"""

import pytest
from datetime import date, datetime, timezone
from core.exceptions import NormalizationError
from core.points import CategoryPointTable
from ingestion.transformers.normalizer import (
    CATEGORY_RULE,
    QUANTITY_RULE,
    TOOL_RULE,
    FieldRule,
    TaskNormalizer,
    label_value,
    number_value,
)


def field(name, enum=None, display=None, number=None):
    return {
        "name": name,
        "enum_value": {"name": enum} if enum is not None else None,
        "display_value": display,
        "number_value": number,
    }


class TestFieldRules:
    """Custom field matching"""

    @pytest.mark.parametrize("name", ["Video Type", "videotype", "Main VIDEO TYPE (v2)", "Type", " type "])
    def test_category_rule_matches(self, name):
        assert CATEGORY_RULE.matches(name)

    @pytest.mark.parametrize("name", ["Typeface", "Task type", "Priority", "", None])
    def test_category_rule_rejects(self, name):
        # "Task type" contains neither "video type" nor equals "type"
        assert not CATEGORY_RULE.matches(name)

    @pytest.mark.parametrize("name", ["Quantity", "Video count", "QTY"])
    def test_quantity_rule_matches(self, name):
        assert QUANTITY_RULE.matches(name)

    @pytest.mark.parametrize("name", ["CTST", "Creative Tool Used"])
    def test_tool_rule_matches(self, name):
        assert TOOL_RULE.matches(name)

    def test_first_matching_field_wins(self):
        fields = [field("Type", enum="S4"), field("Video Type", enum="S1")]

        assert CATEGORY_RULE.apply(fields) == "S4"

    def test_no_matching_field(self):
        assert CATEGORY_RULE.apply([field("Priority", enum="High")]) is None

    def test_label_prefers_enum_then_display(self):
        assert label_value(field("Type", enum="S3B", display="other")) == "S3B"
        assert label_value(field("Type", display="S5")) == "S5"
        assert label_value(field("Type", enum="", display="")) is None

    def test_number_value(self):
        assert number_value(field("Quantity", number=3)) == 3
        assert number_value(field("Quantity", number=2.0)) == 2
        assert number_value(field("Quantity", number="abc")) is None
        assert number_value(field("Quantity")) is None

    def test_custom_rule(self):
        rule = FieldRule(target="category", extract=label_value, equals=("format",))

        assert rule.apply([field("Format", enum="S7")]) == "S7"


class TestTaskNormalizer:
    """Normalization of raw Asana tasks"""

    def test_points_from_category_and_quantity(self, asana_task):
        task = TaskNormalizer().normalize(asana_task("1", category="S1", quantity=2))

        assert task.category == "S1"
        assert task.quantity == 2
        assert task.points == 6.0

    def test_unmapped_category_scores_zero(self, asana_task):
        task = TaskNormalizer().normalize(asana_task("1", category="ZZZ", quantity=4))

        assert task.category == "ZZZ"
        assert task.quantity == 4
        assert task.points == 0

    def test_no_category_field(self, asana_task):
        task = TaskNormalizer().normalize(asana_task("1"))

        assert task.category is None
        assert task.quantity == 1
        assert task.points == 0

    @pytest.mark.parametrize("raw_quantity", [0, -3])
    def test_quantity_floor(self, asana_task, raw_quantity):
        task = TaskNormalizer().normalize(asana_task("1", category="S4", quantity=raw_quantity))

        assert task.quantity == 1
        assert task.points == 5.0

    def test_status_and_dates(self, asana_task):
        raw = asana_task(
            "42",
            completed=True,
            completed_at="2025-05-10T08:15:00.000Z",
            due_on="2025-05-10",
            email="ana@example.com",
            tool="Canva",
            tags=["launch", "q2"],
        )

        task = TaskNormalizer().normalize(raw)

        assert task.external_id == "42"
        assert task.status == "done"
        assert task.completed_at == datetime(2025, 5, 10, 8, 15, tzinfo=timezone.utc)
        assert task.due_date == date(2025, 5, 10)
        assert task.assignee_name == "Ana"
        assert task.assignee_email == "ana@example.com"
        assert task.tool == "Canva"
        assert task.tags == ["launch", "q2"]
        assert task.raw_payload == raw

    def test_not_done_task(self, asana_task):
        task = TaskNormalizer().normalize(asana_task("7", completed=False))

        assert task.status == "not_done"
        assert task.completed_at is None

    def test_malformed_fields_degrade(self, asana_task):
        raw = asana_task("9", completed_at="yesterday", due_on="soon", assignee=None)
        raw["custom_fields"] = "not a list of dicts"
        raw["tags"] = None

        task = TaskNormalizer().normalize(raw)

        assert task.completed_at is None
        assert task.due_date is None
        assert task.assignee_name is None
        assert task.quantity == 1
        assert task.tags == []

    def test_missing_gid_raises(self, asana_task):
        with pytest.raises(NormalizationError):
            TaskNormalizer().normalize(asana_task(None))

    def test_custom_point_table(self, asana_task):
        normalizer = TaskNormalizer(CategoryPointTable({"S1": 10}))

        assert normalizer.normalize(asana_task("1", category="S1", quantity=3)).points == 30.0

    def test_normalize_many_skips_unkeyed(self, asana_task):
        records = [asana_task("1"), asana_task(None), asana_task("3")]

        normalized, skipped = TaskNormalizer().normalize_many(records)

        assert [t.external_id for t in normalized] == ["1", "3"]
        assert skipped == 1

    def test_lowercase_category_stored_in_table_spelling(self, asana_task):
        task = TaskNormalizer().normalize(asana_task("1", category="s2a", quantity=2))

        assert task.category == "S2A"
        assert task.points == 4.0

    def test_overlong_values_degrade_instead_of_dropping(self, asana_task):
        raw = asana_task("9", name="N" * 2000, category="S1 " + "x" * 60, tool="T" * 250)

        task = TaskNormalizer().normalize(raw)

        assert task.category is None
        assert task.points == 0
        assert task.tool is None
        assert len(task.name) == 1024

    def test_wrong_shaped_assignee_and_tags(self, asana_task):
        raw = asana_task("2", tags=["launch"])
        raw["assignee"] = "Ana"
        raw["tags"] = 5

        task = TaskNormalizer().normalize(raw)

        assert task.assignee_name is None
        assert task.tags == []

    def test_non_object_record_raises(self):
        with pytest.raises(NormalizationError):
            TaskNormalizer().normalize(None)

    def test_normalize_many_skips_any_failing_record(self, asana_task):
        broken = asana_task("2")
        broken["assignee"] = "Ana"
        records = [asana_task("1"), None, "garbage", broken, asana_task("3")]

        normalized, skipped = TaskNormalizer().normalize_many(records)

        assert [t.external_id for t in normalized] == ["1", "2", "3"]
        assert skipped == 2

    def test_normalize_many_survives_unexpected_errors(self, asana_task):
        class ExplodingTable(CategoryPointTable):
            def points_for(self, code, quantity):
                if code == "S7":
                    raise RuntimeError("weight lookup failed")
                return super().points_for(code, quantity)

        records = [asana_task("1", category="S1"), asana_task("2", category="S7"), asana_task("3")]

        normalized, skipped = TaskNormalizer(ExplodingTable()).normalize_many(records)

        assert [t.external_id for t in normalized] == ["1", "3"]
        assert skipped == 1
