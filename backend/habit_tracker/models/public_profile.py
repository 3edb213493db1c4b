from sqlalchemy import Boolean, Column, String, DateTime, true
from sqlalchemy.sql import func
from habit_tracker.db import Base


class PublicProfile(Base):
    __tablename__ = "public_profiles"

    # One sharing record per user
    user_id = Column(String(64), primary_key=True)

    share_token = Column(String(64), nullable=False, unique=True, index=True)
    is_enabled = Column(Boolean, nullable=False, server_default=true())

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
