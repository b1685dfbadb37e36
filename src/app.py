from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QAction, QColor, QFont
from PySide6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPlainTextEdit,
    QProgressBar,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from config_manager import AppConfig, ConfigManager
from controllers.pipeline import TaskPipeline
from models.message import Message
from models.work_item import DropModifiers
from services.codec_backend import ArchiveBackend, BackendError, DefaultBackend, load_backend
from services.file_operations import FileOperations

ERROR_COLOR = "#e64553"
INSTRUCTIONS = (
    "Drop a .cmp file to extract it to a folder",
    "Drop a folder to pack it into a .cmp file",
    "Drop a .m file to extract it to a .yml file",
    "Drop a .yml file to pack it into a .m file",
    "Drop a .bin file to extract it to a text file",
    "Drop a .cms file to decompress to .bin and try to extract as text",
    "Hold cmd / ctrl while dropping to force LZ10 compressing the file (saves as .cms)",
    "Hold shift while dropping to force LZ10 decompressing the file (saves as .bin)",
)
DEFAULT_BACKEND_NOTE = (
    "The built-in codec backend only handles LZ10 and .bin files. Set \"backend\" in "
    "config/app_settings.json to a codec class to pack or extract .cmp and .m archives"
)


def modifiers_from_qt(flags: Qt.KeyboardModifier) -> DropModifiers:
    # Qt reports the macOS Command key as ControlModifier.
    return DropModifiers(
        command=bool(flags & Qt.ControlModifier),
        shift=bool(flags & Qt.ShiftModifier),
        alt=bool(flags & Qt.AltModifier),
    )


def pending_tasks_text(pending: int) -> str:
    if pending <= 0:
        return "No pending tasks."
    noun = "task" if pending == 1 else "tasks"
    return f"{pending} {noun} remaining..."


class App(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Lumina")
        self.resize(800, 600)
        self.setAcceptDrops(True)
        self.config_manager = ConfigManager()
        self.config: AppConfig = self.config_manager.load()
        self._setup_ui()
        self.backend = self._load_backend(self.config.backend)
        if type(self.backend) is DefaultBackend:
            self.instructions_label.setText(self.instructions_label.text() + f"\n• {DEFAULT_BACKEND_NOTE}")
            self._append_console(DEFAULT_BACKEND_NOTE + ".")
        self.operations = FileOperations(
            self.backend,
            byte_order=self.config.byte_order,
            text_encoding=self.config.text_encoding,
        )
        self.pipeline = TaskPipeline(self.operations.run_work_item, max_workers=self.config.max_workers)
        self._tick_timer = QTimer(self)
        self._tick_timer.timeout.connect(self._tick)
        self._tick_timer.start(self.config.poll_interval_ms)
        self._update_pending_status()

    def _setup_ui(self) -> None:
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)

        header = QHBoxLayout()
        self.instructions_button = QPushButton("Instructions", central)
        self.instructions_button.setCheckable(True)
        self.instructions_button.setChecked(self.config.show_instructions)
        self.instructions_button.toggled.connect(self._toggle_instructions)
        self.clear_button = QPushButton("Clear Messages", central)
        self.clear_button.clicked.connect(self._clear_messages)
        self.pending_label = QLabel("No pending tasks.", central)
        self.busy_indicator = QProgressBar(central)
        self.busy_indicator.setRange(0, 0)
        self.busy_indicator.setMaximumWidth(80)
        self.busy_indicator.setVisible(False)
        header.addWidget(self.instructions_button)
        header.addWidget(self.clear_button)
        header.addStretch(1)
        header.addWidget(self.pending_label)
        header.addWidget(self.busy_indicator)
        layout.addLayout(header)

        self.instructions_label = QLabel("\n".join(f"• {line}" for line in INSTRUCTIONS), central)
        self.instructions_label.setVisible(self.config.show_instructions)
        layout.addWidget(self.instructions_label)

        self.message_list = QListWidget(central)
        self.message_list.setSelectionMode(QAbstractItemView.ExtendedSelection)
        message_font = self.message_list.font()
        message_font.setFamilies(["Monospace", "Courier New", message_font.defaultFamily()])
        message_font.setStyleHint(QFont.StyleHint.Monospace)
        self.message_list.setFont(message_font)

        console_container = QWidget(central)
        console_layout = QVBoxLayout(console_container)
        console_layout.setContentsMargins(0, 4, 0, 0)
        console_layout.addWidget(QLabel("Console", console_container))
        self.console_output = QPlainTextEdit(console_container)
        self.console_output.setReadOnly(True)
        self.console_output.setPlaceholderText("Task activity will appear here.")
        console_layout.addWidget(self.console_output)

        splitter = QSplitter(Qt.Vertical, central)
        splitter.addWidget(self.message_list)
        splitter.addWidget(console_container)
        splitter.setStretchFactor(0, 5)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter, 1)
        self.setCentralWidget(central)

        view_menu = self.menuBar().addMenu("View")
        clear_action = QAction("Clear Messages", self)
        clear_action.triggered.connect(self._clear_messages)
        view_menu.addAction(clear_action)

    def _load_backend(self, spec: str) -> ArchiveBackend:
        try:
            return load_backend(spec)
        except BackendError as exc:
            self._append_console(f"{exc}. Falling back to the default codec backend.")
            return DefaultBackend()

    def dragEnterEvent(self, event) -> None:  # type: ignore[override]
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
        else:
            event.ignore()

    def dragMoveEvent(self, event) -> None:  # type: ignore[override]
        self.dragEnterEvent(event)

    def dropEvent(self, event) -> None:  # type: ignore[override]
        modifiers = modifiers_from_qt(event.modifiers())
        paths = [Path(url.toLocalFile()) for url in event.mimeData().urls() if url.isLocalFile()]
        self.enqueue_paths(paths, modifiers)
        event.acceptProposedAction()

    def enqueue_paths(self, paths: Iterable[Path], modifiers: DropModifiers | None = None) -> None:
        for path in paths:
            self.pipeline.enqueue(path, modifiers)
            self._append_console(f"Queued '{path}'")
        self._update_pending_status()

    def _tick(self) -> None:
        messages = self.pipeline.poll_and_advance()
        if messages:
            self._render_messages(messages)
        self._update_pending_status()

    def _render_messages(self, messages: Iterable[Message]) -> None:
        for message in messages:
            item = QListWidgetItem(message.text)
            if message.is_error:
                item.setForeground(QColor(ERROR_COLOR))
            self.message_list.addItem(item)
        self.message_list.scrollToBottom()

    def _clear_messages(self) -> None:
        self.pipeline.clear_messages()
        self.message_list.clear()

    def _toggle_instructions(self, checked: bool) -> None:
        self.instructions_label.setVisible(checked)
        if self.config.show_instructions != checked:
            self.config.show_instructions = checked
            self.config_manager.save(self.config)

    def _update_pending_status(self) -> None:
        pending = self.pipeline.pending_count
        self.pending_label.setText(pending_tasks_text(pending))
        self.busy_indicator.setVisible(pending > 0)

    def _append_console(self, message: str) -> None:
        if not hasattr(self, "console_output"):
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.console_output.appendPlainText(f"[{timestamp}] {message}")


def main() -> int:
    qt_app = QApplication.instance() or QApplication(sys.argv)
    window = App()
    window.show()
    return int(qt_app.exec())


if __name__ == "__main__":
    sys.exit(main())
