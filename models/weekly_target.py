from sqlalchemy import Column, BigInteger, Integer, String, Float, Date, Index
from models.base import Base


class WeeklyTarget(Base):
    """
    Point goal for one assignee in one week.

    Maintained as configuration data: the whole table is replaced on save
    (delete all, insert the new set). The aggregator only reads it.
    """
    __tablename__ = "weekly_targets"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    assignee_name = Column(String(200), nullable=False)
    week_start_date = Column(Date, nullable=False, index=True)
    target_points = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_target_assignee_week", "assignee_name", "week_start_date", unique=True),
    )
