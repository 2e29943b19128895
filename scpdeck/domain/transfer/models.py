"""
Transfer data models

A batch is one user-initiated group of copies. Each item moves through
pending -> running -> succeeded | failed exactly once.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Iterator, List, Optional, Sequence

from ...core.exceptions import StatusTransitionError
from ..listing import RemoteEntry


class TaskStatus(str, Enum):
    """Transfer item state"""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def finished(self) -> bool:
        return self in (TaskStatus.SUCCEEDED, TaskStatus.FAILED)


_TRANSITIONS = {
    TaskStatus.PENDING: (TaskStatus.RUNNING,),
    TaskStatus.RUNNING: (TaskStatus.SUCCEEDED, TaskStatus.FAILED),
    TaskStatus.SUCCEEDED: (),
    TaskStatus.FAILED: (),
}


class TransferDirection(str, Enum):
    """Transfer direction"""
    DOWNLOAD = "download"  # remote → local
    UPLOAD = "upload"      # local → remote


@dataclass
class TransferItemStatus:
    """Display state of one item in a batch"""
    item: RemoteEntry
    state: TaskStatus = TaskStatus.PENDING
    message: str = ""
    progress: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def start(self) -> None:
        self._advance(TaskStatus.RUNNING)

    def succeed(self) -> None:
        self._advance(TaskStatus.SUCCEEDED)

    def fail(self, message: str) -> None:
        self._advance(TaskStatus.FAILED)
        self.message = message

    def note_progress(self, chunk: str) -> None:
        """Keep the last non-empty diagnostic line"""
        lines = [line.strip() for line in chunk.splitlines() if line.strip()]
        if lines:
            self.progress = lines[-1]

    def _advance(self, new_state: TaskStatus) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise StatusTransitionError(
                f"{self.item.name}: cannot go from {self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "item": self.item.to_dict(),
            "state": self.state.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class TransferTarget:
    """What to copy: the displayed entry and its full source path"""
    entry: RemoteEntry
    source: str


@dataclass(frozen=True)
class BatchReport:
    """Summary of a finished batch"""
    direction: TransferDirection
    total: int
    succeeded: int
    failed: int

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "direction": self.direction.value,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
        }


class TransferBatch:
    """Owns the status list of one batch"""

    def __init__(self, direction: TransferDirection, targets: Sequence[TransferTarget]):
        self.direction = direction
        self.targets: List[TransferTarget] = list(targets)
        self._statuses: List[TransferItemStatus] = [
            TransferItemStatus(item=target.entry) for target in self.targets
        ]

    @property
    def statuses(self) -> List[TransferItemStatus]:
        return list(self._statuses)

    def __iter__(self) -> Iterator[tuple[TransferTarget, TransferItemStatus]]:
        return iter(zip(self.targets, self._statuses))

    def __len__(self) -> int:
        return len(self._statuses)

    def status_for(self, name: str) -> Optional[TransferItemStatus]:
        for status in self._statuses:
            if status.item.name == name:
                return status
        return None

    @property
    def finished(self) -> bool:
        return all(status.state.finished for status in self._statuses)

    def report(self) -> BatchReport:
        succeeded = sum(1 for s in self._statuses if s.state == TaskStatus.SUCCEEDED)
        failed = sum(1 for s in self._statuses if s.state == TaskStatus.FAILED)
        return BatchReport(
            direction=self.direction,
            total=len(self._statuses),
            succeeded=succeeded,
            failed=failed,
        )
