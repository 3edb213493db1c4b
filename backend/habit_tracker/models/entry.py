from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from habit_tracker.db import Base, JSONDocument


class Entry(Base):
    __tablename__ = "entries"

    user_id = Column(String(64), primary_key=True)
    date_iso = Column(String(10), primary_key=True, index=True)  # 'YYYY-MM-DD'
    habit_id = Column(String(64), primary_key=True, index=True)

    # Stored payload, e.g. {"value": 12.5} or {"value": true}
    value = Column(JSONDocument, nullable=False)

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
