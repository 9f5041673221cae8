from sqlalchemy import Column, BigInteger, Integer, String, Boolean, Date, DateTime, Text, Index
from datetime import datetime
from models.base import Base


class DayOff(Base):
    """
    A registered absence for one member on one day.

    Rows are created and deleted by the member; edits are a delete followed
    by a new insert, never an in-place update.
    """
    __tablename__ = "day_offs"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    assignee_email = Column(String(320), nullable=False)
    date = Column(Date, nullable=False, index=True)
    is_half_day = Column(Boolean, nullable=False, default=False)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_day_off_email_date", "assignee_email", "date", unique=True),
    )
