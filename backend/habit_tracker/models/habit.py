from sqlalchemy import Column, Integer, String, DateTime, Numeric
from sqlalchemy.sql import func
from habit_tracker.db import Base, JSONDocument


class Habit(Base):
    __tablename__ = "habits"

    # uuid4 string generated by the client
    id = Column(String(64), primary_key=True)

    user_id = Column(String(64), nullable=False, index=True)

    name = Column(String, nullable=False)
    type = Column(String(20), nullable=False, server_default="number")  # number, checkbox
    unit = Column(String, nullable=True)
    decimals = Column(Integer, nullable=False, server_default="0")

    # {"daily": n, "weekly": n, "monthly": n, "yearly": n}
    goals = Column(JSONDocument, nullable=True)

    # Legacy single goal; new writes always store 0 / "daily"
    goal_daily = Column(Numeric(12, 4), nullable=False, server_default="0")
    goal_period = Column(String(10), nullable=False, server_default="daily")

    sort_index = Column(Integer, nullable=False, server_default="0")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
