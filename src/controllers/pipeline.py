"""Bounded pool of worker threads fed from a FIFO backlog.

The controller owns the running list, the backlog and the message log; worker
threads only ever touch their own one-shot result queue.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
import queue
import threading
from typing import Callable, Sequence

from models.message import Message
from models.work_item import DropModifiers, WorkItem, WorkState

DEFAULT_MAX_WORKERS = 16
ABNORMAL_TERMINATION = "Worker thread terminated abnormally."

WorkRunner = Callable[[WorkItem], list[Message]]


class Task:
    """A running work item and the channel its worker reports through."""

    def __init__(self, item: WorkItem, runner: WorkRunner) -> None:
        self.item = item
        self.done = False
        self._results: queue.SimpleQueue[list[Message]] = queue.SimpleQueue()
        self._thread = threading.Thread(
            target=self._work,
            args=(runner,),
            name=f"lumina-task-{item.label()}",
            daemon=True,
        )

    def start(self) -> None:
        self.item.state = WorkState.RUNNING
        self._thread.start()

    def _work(self, runner: WorkRunner) -> None:
        self._results.put(list(runner(self.item)))

    def poll(self) -> list[Message] | None:
        try:
            messages = self._results.get_nowait()
        except queue.Empty:
            if self._thread.is_alive():
                return None
            # The worker may have reported between the first check and exiting.
            try:
                messages = self._results.get_nowait()
            except queue.Empty:
                messages = [Message.error(ABNORMAL_TERMINATION)]
        self.done = True
        self.item.state = WorkState.COMPLETED
        return messages


class TaskPipeline:
    def __init__(self, runner: WorkRunner, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got {max_workers}")
        self.runner = runner
        self.max_workers = max_workers
        self._running: list[Task] = []
        self._backlog: deque[WorkItem] = deque()
        self._messages: list[Message] = []

    @property
    def running_count(self) -> int:
        return len(self._running)

    @property
    def backlog_count(self) -> int:
        return len(self._backlog)

    @property
    def pending_count(self) -> int:
        return len(self._running) + len(self._backlog)

    @property
    def messages(self) -> Sequence[Message]:
        return tuple(self._messages)

    def running_items(self) -> list[WorkItem]:
        return [task.item for task in self._running]

    def backlog_items(self) -> list[WorkItem]:
        return list(self._backlog)

    def clear_messages(self) -> None:
        self._messages.clear()

    def enqueue(self, path: Path | str, modifiers: DropModifiers | None = None) -> WorkItem:
        item = WorkItem(Path(path), modifiers or DropModifiers())
        if len(self._running) < self.max_workers:
            self._dispatch(item)
        else:
            self._backlog.append(item)
        return item

    def poll_and_advance(self) -> list[Message]:
        arrived: list[Message] = []
        still_running: list[Task] = []
        for task in self._running:
            messages = task.poll()
            if messages is None:
                still_running.append(task)
            else:
                arrived.extend(messages)
        self._running = still_running
        self._messages.extend(arrived)

        free_slots = self.max_workers - len(self._running)
        for _ in range(min(free_slots, len(self._backlog))):
            self._dispatch(self._backlog.popleft())
        return arrived

    def _dispatch(self, item: WorkItem) -> None:
        task = Task(item, self.runner)
        self._running.append(task)
        task.start()
