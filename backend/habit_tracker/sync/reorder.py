"""Drag / touch reordering of the habit list.

Gesture handling itself lives in the client; here a gesture is just a
sequence of "dragging X is now over Y" events followed by an end event.
"""
from typing import Optional


def move_habit(habits, from_id: str, to_id: str) -> Optional[list]:
    """Move `from_id` to the position `to_id` occupies (array move, not swap).

    Returns the new list, or None when nothing would change.
    """
    if not from_id or not to_id or from_id == to_id:
        return None
    lst = list(habits)
    ids = [h.id for h in lst]
    if from_id not in ids or to_id not in ids:
        return None
    from_index = ids.index(from_id)
    to_index = ids.index(to_id)

    moved = lst.pop(from_index)
    lst.insert(to_index, moved)
    return lst


def assign_sort_indexes(habits) -> list:
    return [
        h if h.sort_index == idx else h.model_copy(update={"sort_index": idx})
        for idx, h in enumerate(habits)
    ]


class ReorderCoordinator:
    """Accumulates live-preview moves for one gesture."""

    def __init__(self):
        self.dragging_id: str = ""
        self._pending: Optional[list] = None

    def begin(self, habit_id: str) -> None:
        self.dragging_id = habit_id
        self._pending = None

    def over(self, habits, over_id: str) -> Optional[list]:
        if not self.dragging_id or not over_id or over_id == self.dragging_id:
            return None
        nxt = move_habit(habits, self.dragging_id, over_id)
        if nxt is not None:
            self._pending = nxt
        return nxt

    def end(self) -> Optional[list]:
        pending = self._pending
        self._pending = None
        self.dragging_id = ""
        return pending


def apply_order(habits, ordered_ids) -> list:
    """Arrange the current `habits` by `ordered_ids`.

    Ids that no longer exist are skipped; habits missing from `ordered_ids`
    keep their relative order after the ordered ones.
    """
    by_id = {h.id: h for h in habits}
    out = [by_id.pop(i) for i in ordered_ids if i in by_id]
    out.extend(h for h in habits if h.id in by_id)
    return out
