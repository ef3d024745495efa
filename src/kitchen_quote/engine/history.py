"""
History Manager - bounded undo/redo over job parameter snapshots.

Snapshots hold JobParameters and Options only. Pricing rates are
deliberately left out, so rate changes are never undone.
"""
import logging
from dataclasses import dataclass, fields
from typing import Optional

from .models import JobParameters, Options

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 20


def _freeze(value):
    return tuple(value) if isinstance(value, list) else value


@dataclass(frozen=True)
class HistorySnapshot:
    """
    Immutable point-in-time copy of the undoable inputs.

    Field values are stored as tuples; ``params`` and ``options`` build
    new objects on every access, so nothing handed out can change history.
    """
    params_fields: tuple
    options_fields: tuple

    @classmethod
    def capture(cls, params: JobParameters, options: Options) -> 'HistorySnapshot':
        """Copy live inputs field by field so later edits cannot leak in."""
        params_fields = tuple((f.name, getattr(params, f.name)) for f in fields(params))
        options_fields = tuple((f.name, _freeze(getattr(options, f.name))) for f in fields(options))
        return cls(params_fields=params_fields, options_fields=options_fields)

    @property
    def params(self) -> JobParameters:
        return JobParameters(**dict(self.params_fields))

    @property
    def options(self) -> Options:
        values = dict(self.options_fields)
        values['commission_splits'] = list(values['commission_splits'])
        return Options(**values)

    def restore(self) -> tuple[JobParameters, Options]:
        """Fresh copies for the caller to own."""
        return self.params, self.options


class HistoryManager:
    """
    Linear undo/redo timeline with a fixed capacity.

    Pushing after an undo drops the redo branch. Once the stack is over
    capacity the oldest snapshot is evicted and the index shifts down.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.snapshots: list[HistorySnapshot] = []
        self.index = -1

    def __len__(self) -> int:
        return len(self.snapshots)

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    @property
    def current(self) -> Optional[HistorySnapshot]:
        if self.index < 0:
            return None
        return self.snapshots[self.index]

    def push(self, snapshot: HistorySnapshot) -> None:
        """Append a snapshot, truncating any redo branch first."""
        if self.index < len(self.snapshots) - 1:
            dropped = len(self.snapshots) - 1 - self.index
            del self.snapshots[self.index + 1:]
            logger.debug("Discarded %d redo snapshot(s)", dropped)

        self.snapshots.append(snapshot)
        self.index = len(self.snapshots) - 1

        if len(self.snapshots) > self.capacity:
            self.snapshots.pop(0)
            self.index -= 1

    def undo(self) -> Optional[HistorySnapshot]:
        """Step back one snapshot; None when already at the oldest."""
        if not self.can_undo:
            return None
        self.index -= 1
        return self.snapshots[self.index]

    def redo(self) -> Optional[HistorySnapshot]:
        """Step forward one snapshot; None when already at the newest."""
        if not self.can_redo:
            return None
        self.index += 1
        return self.snapshots[self.index]

    def clear(self) -> None:
        self.snapshots.clear()
        self.index = -1
