# src/ndef_text_qt5/ui/main_window.py
from __future__ import annotations

from PyQt5 import QtWidgets, QtGui, QtCore
import sys
import traceback

from ..config.settings import Settings
from ..nfc.events import DiagnosticEvent
from ..nfc.pcsc import PcscPageTag, connect_first_reader, is_supported_atr, list_readers
from ..nfc.presence import QtPresenceBridge, start_presence_monitor, stop_presence_monitor
from ..nfc.session import MAX_TEXT_BYTES, TagResult, decode_image, read_tag, text_fits, write_tag
from ..utils.hexdump import fmt_hex, parse_hex
from .render import render_read, render_write


class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, title: str, version: str, settings: Settings):
        super().__init__()
        self.setWindowTitle(f"{title} - {version}")
        self.resize(760, 620)
        self.settings = settings

        self.reader_available = False
        self.card_present = False

        # === central UI ===
        central = QtWidgets.QWidget()
        self.setCentralWidget(central)
        layout = QtWidgets.QVBoxLayout(central)
        layout.setSpacing(10)
        layout.setContentsMargins(10, 10, 10, 10)

        # === reader status ===
        status_row = QtWidgets.QHBoxLayout()
        layout.addLayout(status_row)
        self.reader_label = QtWidgets.QLabel("", alignment=QtCore.Qt.AlignCenter)
        f = self.reader_label.font()
        f.setBold(True)
        f.setPointSize(f.pointSize() + 2)
        self.reader_label.setFont(f)
        self.btn_refresh = QtWidgets.QToolButton()
        self.btn_refresh.setText("Refresh")
        self.btn_refresh.setToolTip("Refresh reader status")
        status_row.addStretch()
        status_row.addWidget(self.reader_label)
        status_row.addWidget(self.btn_refresh)
        status_row.addStretch()

        # === text to write ===
        write_box = QtWidgets.QGroupBox("Text")
        layout.addWidget(write_box)
        v_write = QtWidgets.QVBoxLayout(write_box)
        self.text_input = QtWidgets.QLineEdit()
        self.text_input.setPlaceholderText("Text to write")
        self.chk_write_mode = QtWidgets.QCheckBox("Write mode (write text when a tag is placed)")
        self.size_label = QtWidgets.QLabel("")
        v_write.addWidget(self.text_input)
        row = QtWidgets.QHBoxLayout()
        row.addWidget(self.chk_write_mode)
        row.addStretch()
        row.addWidget(self.size_label)
        v_write.addLayout(row)

        # === buttons ===
        btn_row = QtWidgets.QHBoxLayout()
        layout.addLayout(btn_row)
        self.btn_read = QtWidgets.QPushButton("READ NFC")
        self.btn_write = QtWidgets.QPushButton("WRITE NFC")
        self.btn_decode_hex = QtWidgets.QPushButton("Decode hex dump")
        btn_row.addStretch()
        btn_row.addWidget(self.btn_read)
        btn_row.addWidget(self.btn_write)
        btn_row.addWidget(self.btn_decode_hex)
        btn_row.addStretch()

        # === result ===
        result_box = QtWidgets.QGroupBox("Result")
        layout.addWidget(result_box, 1)
        v_result = QtWidgets.QVBoxLayout(result_box)
        self.result_view = QtWidgets.QPlainTextEdit()
        self.result_view.setReadOnly(True)
        self.result_view.setFont(QtGui.QFontDatabase.systemFont(QtGui.QFontDatabase.FixedFont))
        v_result.addWidget(self.result_view)

        # === log area ===
        log_row = QtWidgets.QHBoxLayout()
        layout.addLayout(log_row, 1)
        self.output = QtWidgets.QPlainTextEdit()
        self.output.setReadOnly(True)
        self.btn_clear_log = QtWidgets.QToolButton()
        self.btn_clear_log.setText("Clear Log")
        right_col = QtWidgets.QVBoxLayout()
        right_col.addWidget(self.btn_clear_log, 0, QtCore.Qt.AlignTop)
        right_col.addStretch()
        log_row.addWidget(self.output, 1)
        log_row.addLayout(right_col, 0)

        self.statusBar().showMessage("Ready")

        # signals
        self.btn_refresh.clicked.connect(self.refresh_reader_status)
        self.btn_read.clicked.connect(self.on_read)
        self.btn_write.clicked.connect(self.on_write)
        self.btn_decode_hex.clicked.connect(self.on_decode_hex)
        self.btn_clear_log.clicked.connect(self.clear_log)
        self.text_input.textChanged.connect(self._on_text_changed)
        self.chk_write_mode.toggled.connect(lambda _: self._update_actions())

        # monitor
        self.refresh_reader_status()
        self.reader_timer = QtCore.QTimer(self)
        self.reader_timer.setInterval(settings.poll_interval_ms)
        self.reader_timer.timeout.connect(self.refresh_reader_status)
        self.reader_timer.start()

        self._presence_bridge = QtPresenceBridge()
        self._presence_bridge.presenceChanged.connect(self.on_card_presence_changed)
        self._presence_bridge.tagPlaced.connect(self.on_tag_placed)
        try:
            self._card_monitor, self._presence_observer = start_presence_monitor(self._presence_bridge)
        except Exception:
            self._card_monitor = self._presence_observer = None
            self.log_exception("[WARN] Card presence monitor unavailable")

        self._on_text_changed(self.text_input.text())

    # ---------- basic helpers ----------
    def clear_log(self):
        self.output.clear()

    def log(self, msg: str):
        self.output.appendPlainText(msg)

    def log_event(self, event: DiagnosticEvent):
        """Diagnostic sink handed to every session."""
        self.log(f"[DBG] {event}")

    def log_exception(self, prefix: str = "[ERROR]"):
        """Append full traceback of the active exception to the log window and stderr."""
        exc = traceback.format_exc()
        self.log(f"{prefix}\n{exc}")
        print(exc, file=sys.stderr)

    def refresh_reader_status(self):
        self.reader_available = bool(list_readers())
        if not self.reader_available:
            self.card_present = False
            self.reader_label.setText("No reader")
        else:
            self.reader_label.setText("Tag present" if self.card_present else "Place a tag on the reader")
        self._update_actions()

    def _update_actions(self):
        text_ok = bool(self.text_input.text()) and text_fits(self.text_input.text())
        self.btn_read.setEnabled(self.reader_available)
        self.btn_write.setEnabled(self.reader_available and self.card_present and text_ok)

    def _on_text_changed(self, text: str):
        used = len(text.encode("utf-8"))
        self.size_label.setText(f"{used}/{MAX_TEXT_BYTES} bytes")
        self.size_label.setStyleSheet("" if used <= MAX_TEXT_BYTES else "color: #C00;")
        self._update_actions()

    def _open_tag(self) -> PcscPageTag | None:
        conn = connect_first_reader()
        if conn is None:
            self.log("[ERROR] No NFC reader available.")
            self.reader_available = False
            self.refresh_reader_status()
            return None
        return PcscPageTag(conn, delay_ms=self.settings.delay_ms)

    # ---------- presence ----------
    @QtCore.pyqtSlot(bool)
    def on_card_presence_changed(self, present: bool):
        self.card_present = present
        self.refresh_reader_status()

    @QtCore.pyqtSlot(bytes)
    def on_tag_placed(self, atr: bytes):
        self.log(f"[INFO] Tag detected, ATR: {fmt_hex(atr) or '(empty)'}")
        if atr and not is_supported_atr(atr):
            self.log("[WARN] Not a supported tag.")
            return
        if self.chk_write_mode.isChecked():
            self.on_write()
        else:
            self.on_read()

    # ---------- NFC: READ ----------
    def on_read(self):
        tag = self._open_tag()
        if tag is None:
            return
        try:
            result = read_tag(tag, self.settings, sink=self.log_event)
        except Exception:
            self.log_exception()
            return
        self._show_read(result)

    def _show_read(self, result: TagResult):
        self.result_view.setPlainText(render_read(result))
        if result.ok:
            self.log(f"[OK] Read text ({len(result.text)} chars, lang={result.language})")
            self.statusBar().showMessage("Read OK", 3000)
        else:
            self.log(f"[ERROR] {result.kind.name}: {result.message}")
            self.statusBar().showMessage(f"Read failed: {result.kind.name}", 5000)

    # ---------- NFC: WRITE ----------
    def on_write(self):
        text = self.text_input.text()
        if not text:
            self.log("[INFO] Nothing to write.")
            return
        if not text_fits(text):
            QtWidgets.QMessageBox.warning(
                self, "Text too long",
                f"The text needs {len(text.encode('utf-8'))} bytes; at most {MAX_TEXT_BYTES} fit one record.")
            return
        tag = self._open_tag()
        if tag is None:
            return
        try:
            result = write_tag(tag, text, self.settings, sink=self.log_event)
        except Exception:
            self.log_exception()
            return

        self.result_view.setPlainText(render_write(result))
        if result.ok:
            self.log(f"[OK] Wrote {result.pages_written} pages.")
            self.statusBar().showMessage("Write OK", 3000)
        else:
            self.log(f"[ERROR] {result.kind.name}: {result.message}")
            self.statusBar().showMessage(f"Write failed: {result.kind.name}", 5000)

    # ---------- offline decode ----------
    def on_decode_hex(self):
        text, ok = QtWidgets.QInputDialog.getMultiLineText(
            self, "Decode hex dump", "Memory image from page 0 (hex bytes):")
        if not ok or not text.strip():
            return
        try:
            image = parse_hex(text)
        except ValueError as e:
            self.log(f"[ERROR] Invalid hex: {e}")
            return
        self.log(f"[INFO] Decoding {len(image)} pasted bytes.")
        self._show_read(decode_image(image, sink=self.log_event))

    # ---------- close ----------
    def closeEvent(self, event: QtGui.QCloseEvent):
        try:
            if self._card_monitor is not None:
                try:
                    stop_presence_monitor(self._card_monitor, self._presence_observer)
                except Exception:
                    self.log_exception("[WARN] Stopping presence monitor failed")
        finally:
            super().closeEvent(event)
