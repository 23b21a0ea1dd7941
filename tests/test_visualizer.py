#!/usr/bin/env python3
"""
Smoke tests for the Qt visualizer, run on the offscreen platform.
"""

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

pytest.importorskip("PyQt5.QtWidgets")
pytest.importorskip("matplotlib.backends.backend_qt5agg")

from PyQt5.QtWidgets import QApplication  # noqa: E402

from bfinterp.visualizer import HELLO_WORLD, TapeVisualizer  # noqa: E402


@pytest.fixture(scope="module")
def app():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(app):
    w = TapeVisualizer()
    yield w
    w.close()


def test_loads_example_program(window):
    assert window.code_edit.toPlainText() == HELLO_WORLD
    assert window.program_view.toPlainText() == window.session.program_text
    assert window.memory_table.rowCount() == TapeVisualizer.VISIBLE_ROWS


def test_step_updates_state(window):
    window.step_execution()
    window.step_execution()
    assert window.session.step_count == 2
    assert window.memory_table.item(0, 0).text() == "8"
    assert "Steps: 2" in window.status_info.text()


def test_batch_run_to_completion(window):
    window.set_speed(2000)
    window.running = True
    for _ in range(10_000):
        if not window.running:
            break
        window.execute_step()
    assert window.session.finished
    assert window.session.output_text == "Hello World!\n"
    assert "Hello World!" in window.output_display.toPlainText()
    assert window.status_info.text() == "Program finished."


def test_pauses_for_input(app):
    w = TapeVisualizer(",.")
    try:
        w.running = True
        w.execute_step()
        assert not w.running
        assert "waiting for input" in w.status_info.text()
        w.input_line.setText("Z")
        w.update_input_buffer()
        for _ in range(10):
            if not w.running:
                break
            w.execute_step()
        assert w.session.output_text == "Z"
    finally:
        w.close()


def test_unoptimized_view(app):
    w = TapeVisualizer("+++[-].", optimize=False)
    try:
        assert w.program_view.toPlainText() == "+++[-]."
        assert len(w.session.program) == 7
    finally:
        w.close()


def test_pointer_cell_follows_moves(app):
    w = TapeVisualizer("+>++")
    try:
        for _ in range(3):
            w.step_execution()
        assert w.memory_table.item(0, 0).text() == "1"
        assert w.memory_table.item(0, 1).text() == "2"
        assert w.session.pointer == 1
    finally:
        w.close()
