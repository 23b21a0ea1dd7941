import sys
from typing import List, Optional

from PyQt5.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QTextEdit,
    QTableWidget, QTableWidgetItem, QPushButton, QSlider, QLabel, QSplitter,
    QMessageBox, QLineEdit, QCheckBox
)
from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QFont, QColor, QTextCursor
from matplotlib.backends.backend_qt5agg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from .errors import BFExecutionError, BFParseError
from .session import StepResult, TapeSession

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)

POINTER_COLOR = QColor("orange")


class TapeVisualizer(QMainWindow):
    """Single-window stepper: source and program text, tape table, I/O and a trace plot."""

    BATCH_THRESHOLD = 500  # above this speed, several steps run per timer tick
    VISIBLE_ROWS = 100
    COLUMNS = 16

    def __init__(self, source: Optional[str] = None, *, optimize: bool = True):
        super().__init__()
        self.setWindowTitle("Tape Visualizer")
        self.resize(1200, 800)

        self.session = TapeSession(optimize=optimize)
        self.speed = 5
        self.running = False
        self.paused_for_input = False
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.execute_step)

        self._build()
        self.code_edit.setPlainText(source if source is not None else HELLO_WORLD)
        self.reload()

    def _build(self):
        mono = QFont("Courier", 11)

        self.code_edit = QTextEdit()
        self.code_edit.setFont(mono)
        self.program_view = QTextEdit()
        self.program_view.setReadOnly(True)
        self.program_view.setFont(mono)

        self.memory_table = QTableWidget(self.VISIBLE_ROWS, self.COLUMNS)
        self.memory_table.setHorizontalHeaderLabels([f"{i:X}" for i in range(self.COLUMNS)])
        self.memory_table.setVerticalHeaderLabels(
            [f"{r * self.COLUMNS:05d}" for r in range(self.VISIBLE_ROWS)])
        self.memory_table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.memory_table.setFont(mono)

        self.output_display = QTextEdit()
        self.output_display.setReadOnly(True)
        self.output_display.setFont(mono)
        self.input_line = QLineEdit()
        self.input_line.setPlaceholderText("Input characters (Enter to send, empty Enter closes input)")
        self.input_line.returnPressed.connect(self.update_input_buffer)

        self.figure = Figure(figsize=(6, 2))
        self.canvas = FigureCanvas(self.figure)

        self.run_button = QPushButton("Run")
        step_button = QPushButton("Step")
        reset_button = QPushButton("Reset")
        optimize_box = QCheckBox("Optimize")
        optimize_box.setChecked(self.session.optimize)
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(1, 2000)
        self.speed_slider.setValue(self.speed)
        self.speed_label = QLabel()

        self.run_button.clicked.connect(self.toggle_execution)
        step_button.clicked.connect(self.step_execution)
        reset_button.clicked.connect(self.reset_execution)
        optimize_box.toggled.connect(self.set_optimize)
        self.speed_slider.valueChanged.connect(self.set_speed)

        controls = QHBoxLayout()
        for widget in (self.run_button, step_button, reset_button, optimize_box):
            controls.addWidget(widget)
        controls.addWidget(QLabel("Speed:"))
        controls.addWidget(self.speed_slider, 1)
        controls.addWidget(self.speed_label)

        io_panel = QWidget()
        io_layout = QVBoxLayout(io_panel)
        io_layout.setContentsMargins(0, 0, 0, 0)
        io_layout.addWidget(self.output_display)
        io_layout.addWidget(self.input_line)

        texts = QSplitter(Qt.Vertical)
        texts.addWidget(self.code_edit)
        texts.addWidget(self.program_view)
        state = QSplitter(Qt.Vertical)
        state.addWidget(self.memory_table)
        state.addWidget(io_panel)
        panes = QSplitter(Qt.Horizontal)
        panes.addWidget(texts)
        panes.addWidget(state)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addLayout(controls)
        layout.addWidget(panes, 3)
        layout.addWidget(self.canvas, 1)
        self.setCentralWidget(central)

        self.status_info = QLabel("Ready")
        self.statusBar().addWidget(self.status_info)
        self.set_speed(self.speed)

    # ---- display ----
    def reload(self) -> bool:
        """Load the editor text into the session and redraw. False on a parse error."""
        try:
            self.session.load_program(self.code_edit.toPlainText())
        except BFParseError as e:
            QMessageBox.critical(self, "Parse Error", str(e))
            self.status_info.setText("Parse error.")
            return False
        self.paused_for_input = False
        self.program_view.setPlainText(self.session.program_text)
        self.input_line.clear()
        self.refresh_memory_cells()
        self.refresh()
        self.update_graph()
        return True

    def refresh(self):
        self.update_code_highlight()
        self.output_display.setPlainText(self.session.output_text[-10000:])
        self.output_display.moveCursor(QTextCursor.End)
        self.update_status_info()

    def update_status_info(self):
        session = self.session
        value = int(session.memory[session.pointer])
        ins = session.current_instruction()
        self.status_info.setText(
            f"PC: {session.pc} | Pointer: {session.pointer} | "
            f"Instruction: {'End' if ins is None else repr(ins)} | "
            f"Value: {value} | Steps: {session.step_count:,}")

    def update_code_highlight(self):
        span = self.session.current_span()
        if span is None:
            self.program_view.setExtraSelections([])
            return
        cursor = self.program_view.textCursor()
        cursor.setPosition(span[0])
        cursor.setPosition(span[1], QTextCursor.KeepAnchor)
        selection = QTextEdit.ExtraSelection()
        selection.cursor = cursor
        selection.format.setBackground(POINTER_COLOR)
        self.program_view.setExtraSelections([selection])

    def refresh_memory_cells(self):
        visible = min(len(self.session.memory), self.VISIBLE_ROWS * self.COLUMNS)
        for addr in range(visible):
            self.update_memory_cell(addr)

    def update_memory_cell(self, addr: int):
        row, col = divmod(addr, self.COLUMNS)
        if addr < 0 or row >= self.VISIBLE_ROWS or addr >= len(self.session.memory):
            return
        item = self.memory_table.item(row, col)
        if item is None:
            item = QTableWidgetItem()
            item.setTextAlignment(Qt.AlignCenter)
            self.memory_table.setItem(row, col, item)
        item.setText(str(int(self.session.memory[addr])))
        if addr == self.session.pointer:
            item.setBackground(POINTER_COLOR)
        else:
            item.setData(Qt.BackgroundRole, None)

    def update_graph(self):
        self.figure.clear()
        trace = self.figure.add_subplot(121)
        tape = self.figure.add_subplot(122)

        history = self.session.history[-2000:]
        if len(history) >= 2:
            steps, pcs = zip(*history)
            trace.plot(steps, pcs, linewidth=1)
        trace.set_xlabel("Steps")
        trace.set_ylabel("PC")

        addrs = self.session.nonzero_cells()
        if len(addrs) > 0:
            tape.scatter(addrs, self.session.memory[addrs], s=4)
        tape.axvline(x=self.session.pointer, color="orange")
        tape.set_xlabel("Cell")
        tape.set_ylabel("Value")

        self.figure.tight_layout()
        self.canvas.draw()

    # ---- execution ----
    def _apply(self, result: StepResult):
        if result.old_pointer != result.new_pointer:
            self.update_memory_cell(result.old_pointer)
            self.update_memory_cell(result.new_pointer)
        if result.changed_address != -1:
            self.update_memory_cell(result.changed_address)

    def _advance(self, steps: int) -> Optional[StepResult]:
        try:
            if steps == 1:
                result = self.session.step()
                self._apply(result)
            else:
                result, _ = self.session.run(steps)
                self.refresh_memory_cells()
        except BFExecutionError as e:
            self.stop_execution()
            self.status_info.setText("Execution error.")
            QMessageBox.critical(self, "Execution Error", str(e))
            return None
        return result

    def step_execution(self):
        result = self._advance(1)
        if result is None:
            return
        self.refresh()
        if result.waiting:
            self.status_info.setText("Waiting for input...")
        if self.session.step_count % 100 == 0:
            self.update_graph()

    def execute_step(self):
        if not self.running:
            self.timer.stop()
            return

        batch = self.speed > self.BATCH_THRESHOLD
        result = self._advance(max(1, self.speed // 100) if batch else 1)
        if result is None:
            return

        if result.waiting:
            self.stop_execution()
            self.paused_for_input = True
            self.refresh()
            self.status_info.setText("Paused, waiting for input...")
            return
        self.refresh()
        if not result.continues:
            self.stop_execution()
            self.update_graph()
            self.status_info.setText("Program finished.")
        elif self.session.step_count % (200 if batch else 50) == 0:
            self.update_graph()

    def _interval(self) -> int:
        if self.speed > self.BATCH_THRESHOLD:
            return 10
        return max(1, 1000 // self.speed)

    def toggle_execution(self):
        if self.running:
            self.stop_execution()
            return
        if self.session.finished:
            self.reset_execution()
        self.paused_for_input = False
        self.running = True
        self.run_button.setText("Pause")
        self.timer.start(self._interval())

    def stop_execution(self):
        self.running = False
        self.timer.stop()
        self.run_button.setText("Run")

    def reset_execution(self):
        self.stop_execution()
        if self.reload():
            self.status_info.setText("Ready.")

    def set_optimize(self, checked: bool):
        self.session.optimize = checked
        self.reset_execution()

    def set_speed(self, speed: int):
        self.speed = speed
        suffix = " (batch)" if speed > self.BATCH_THRESHOLD else ""
        self.speed_label.setText(f"{speed} steps/s{suffix}")
        if self.timer.isActive():
            self.timer.setInterval(self._interval())

    def update_input_buffer(self):
        text = self.input_line.text()
        if text:
            self.session.feed_input(text)
        else:
            self.session.close_input()
        self.input_line.clear()
        if self.paused_for_input and not self.running:
            self.toggle_execution()

    def closeEvent(self, event):
        self.stop_execution()
        event.accept()


def main(argv: Optional[List[str]] = None, *, source: Optional[str] = None, optimize: bool = True) -> int:
    app = QApplication(argv if argv is not None else sys.argv)
    window = TapeVisualizer(source, optimize=optimize)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    raise SystemExit(main())
