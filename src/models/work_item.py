from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class WorkState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DropModifiers:
    """Keyboard modifiers held while a path was dropped."""

    command: bool = False
    shift: bool = False
    alt: bool = False

    def command_only(self) -> bool:
        return self.command and not self.shift and not self.alt

    def shift_only(self) -> bool:
        return self.shift and not self.command and not self.alt


@dataclass
class WorkItem:
    path: Path
    modifiers: DropModifiers = field(default_factory=DropModifiers)
    state: WorkState = WorkState.PENDING

    def label(self) -> str:
        return self.path.name or str(self.path)
