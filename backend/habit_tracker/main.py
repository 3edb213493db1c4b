import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from habit_tracker.api.entries import router as entries_router
from habit_tracker.api.habits import router as habits_router
from habit_tracker.api.session import router as session_router
from habit_tracker.api.state import router as state_router
from habit_tracker.db import Base, SessionLocal, engine
from habit_tracker.models.entry import Entry  # noqa: F401  (import ensures table is registered)
from habit_tracker.models.habit import Habit  # noqa: F401
from habit_tracker.models.public_profile import PublicProfile  # noqa: F401
from habit_tracker.core.config import settings
from habit_tracker.sync.cache import LocalCache
from habit_tracker.sync.engine import SyncEngine
from habit_tracker.sync.remote import SqlRemoteStore


logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title="Habit Tracker")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables (habits, entries, public_profiles) on startup
Base.metadata.create_all(bind=engine)

# One engine per process: state tree + local cache + remote store
app.state.tracker = SyncEngine(
    remote=SqlRemoteStore(SessionLocal),
    cache=LocalCache(settings.cache_dir),
)

app.include_router(session_router)
app.include_router(habits_router)
app.include_router(entries_router)
app.include_router(state_router)


@app.get("/")
def root():
    return {"message": "Habit tracker backend is running"}
