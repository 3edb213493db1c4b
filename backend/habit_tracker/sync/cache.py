"""Local durable cache: one JSON blob under a fixed key."""
import logging
import os
import uuid
from pathlib import Path

from pydantic import ValidationError

from habit_tracker.core.constants import STORAGE_KEY
from habit_tracker.schemas.habit import Habit, HabitKind
from habit_tracker.schemas.state import StateTree, UiState

logger = logging.getLogger(__name__)


def default_state() -> StateTree:
    """Seed state used when there is no usable cache."""
    return StateTree(
        habits=(
            Habit(
                id=str(uuid.uuid4()),
                name="Pushups",
                kind=HabitKind.number,
                unit="reps",
                decimals=0,
                goals={"daily": 50},
            ),
            Habit(
                id=str(uuid.uuid4()),
                name="Read",
                kind=HabitKind.checkbox,
                goals={"daily": 1},
                sort_index=1,
            ),
        ),
        entries={},
        ui=UiState(),
    )


class LocalCache:
    def __init__(self, directory: str, key: str = STORAGE_KEY):
        self.path = Path(directory) / f"{key}.json"

    def load(self) -> StateTree:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return default_state()
        except OSError as exc:
            logger.warning("Could not read state cache %s: %s", self.path, exc)
            return default_state()

        try:
            return StateTree.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt state cache %s (%d errors)", self.path, exc.error_count())
            return default_state()

    def save(self, state: StateTree) -> None:
        try:
            os.makedirs(self.path.parent, exist_ok=True)
            self.path.write_text(state.model_dump_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not write state cache %s: %s", self.path, exc)
