from sqlalchemy import JSON, create_engine
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from habit_tracker.core.config import settings

# SQLAlchemy Base class for models to inherit
Base = declarative_base()

# JSONB on Postgres, plain JSON elsewhere (sqlite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def make_engine(url: str):
    if url.startswith("sqlite"):
        # Remote writes run in worker threads; in-memory sqlite must share one connection
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,   # helps avoid stale connections
    )


# Create SQLAlchemy engine (connects to Postgres)
engine = make_engine(settings.database_url)

# Factory that creates DB sessions
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
