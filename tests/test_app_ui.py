import pytest
from PySide6.QtCore import Qt

import app as app_module
from config_manager import ConfigManager
from models.work_item import DropModifiers
from services.codec_backend import DefaultBackend


pytestmark = pytest.mark.timeout(15)


def _make_isolated_app(qtbot, tmp_path, monkeypatch, **settings):
    manager = ConfigManager(path=tmp_path / "app_settings.json")
    config = manager.load()
    for key, value in settings.items():
        setattr(config, key, value)
    manager.save(config)
    monkeypatch.setattr(app_module, "ConfigManager", lambda: manager)
    window = app_module.App()
    qtbot.addWidget(window)
    return window


def test_modifiers_from_qt_maps_flags():
    assert app_module.modifiers_from_qt(Qt.ControlModifier) == DropModifiers(command=True)
    assert app_module.modifiers_from_qt(Qt.ShiftModifier) == DropModifiers(shift=True)
    combined = app_module.modifiers_from_qt(Qt.ControlModifier | Qt.AltModifier)
    assert combined == DropModifiers(command=True, alt=True)
    assert combined.command_only() is False
    assert app_module.modifiers_from_qt(Qt.NoModifier) == DropModifiers()


def test_pending_tasks_text():
    assert app_module.pending_tasks_text(0) == "No pending tasks."
    assert app_module.pending_tasks_text(1) == "1 task remaining..."
    assert app_module.pending_tasks_text(5) == "5 tasks remaining..."


@pytest.mark.qt_no_exception_capture
def test_dropped_unsupported_file_shows_two_red_messages(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch, poll_interval_ms=10)
    source = tmp_path / "foo.xyz"
    source.write_bytes(b"?")

    window.enqueue_paths([source])

    qtbot.waitUntil(lambda: window.message_list.count() == 2, timeout=5000)
    assert window.message_list.item(0).text() == f"Failed to process path '{source}'"
    assert window.message_list.item(1).foreground().color().name() == app_module.ERROR_COLOR
    qtbot.waitUntil(lambda: window.pending_label.text() == "No pending tasks.", timeout=5000)
    assert "Queued" in window.console_output.toPlainText()


@pytest.mark.qt_no_exception_capture
def test_forced_compression_and_clear(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch, poll_interval_ms=10)
    source = tmp_path / "unit.dat"
    source.write_bytes(b"unit" * 64)

    window.enqueue_paths([source], DropModifiers(command=True))

    qtbot.waitUntil(lambda: window.message_list.count() == 1, timeout=5000)
    assert (tmp_path / "unit.cms").is_file()
    assert window.message_list.item(0).text().startswith("Compressed path")

    window.clear_button.click()

    assert window.message_list.count() == 0
    assert window.pipeline.messages == ()


@pytest.mark.qt_no_exception_capture
def test_burst_respects_configured_worker_limit(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch, max_workers=2, poll_interval_ms=10)
    window._tick_timer.stop()
    paths = [tmp_path / f"missing{index}.bin" for index in range(5)]

    window.enqueue_paths(paths)

    assert window.pipeline.running_count == 2
    assert window.pipeline.backlog_count == 3
    assert window.pending_label.text() == "5 tasks remaining..."


@pytest.mark.qt_no_exception_capture
def test_unknown_backend_falls_back_to_default(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch, backend="nope.module:Backend")

    assert isinstance(window.backend, DefaultBackend)
    assert "Falling back" in window.console_output.toPlainText()


@pytest.mark.qt_no_exception_capture
def test_default_backend_limits_are_shown_in_instructions(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch)

    assert app_module.DEFAULT_BACKEND_NOTE in window.instructions_label.text()
    assert '"backend"' in window.console_output.toPlainText()


@pytest.mark.qt_no_exception_capture
def test_external_backend_hides_default_backend_note(qtbot, tmp_path, monkeypatch, fake_backend):
    monkeypatch.setattr(app_module, "load_backend", lambda spec: fake_backend)
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch)

    assert window.backend is fake_backend
    assert app_module.DEFAULT_BACKEND_NOTE not in window.instructions_label.text()


@pytest.mark.qt_no_exception_capture
def test_instructions_toggle_is_persisted(qtbot, tmp_path, monkeypatch):
    window = _make_isolated_app(qtbot, tmp_path, monkeypatch)

    window.instructions_button.setChecked(False)

    assert window.instructions_label.isHidden()
    assert ConfigManager(path=tmp_path / "app_settings.json").load().show_instructions is False
