# src/ndef_text_qt5/app.py
import logging
import sys, traceback
from PyQt5 import QtWidgets, QtCore
from .config.settings import load_settings
from .ui.main_window import MainWindow

APP_TITLE = "NdefTextQT5"
UI_VERSION = "V0.1"

_error_log_file = "qt_error.log"


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def run_app(settings_path: str | None = None):
    global _error_log_file
    settings = load_settings(settings_path)
    setup_logging(settings.log_level)
    _error_log_file = settings.log_file or _error_log_file

    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
    QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
    app = QtWidgets.QApplication(sys.argv)
    win = MainWindow(settings.title or APP_TITLE, UI_VERSION, settings)
    win.show()
    sys.exit(app.exec_())


def _global_excepthook(exctype, value, tb):
    text = "".join(traceback.format_exception(exctype, value, tb))
    # Terminal
    print(text, file=sys.stderr)
    # Error log file next to the working directory
    with open(_error_log_file, "a", encoding="utf-8") as f:
        f.write(text + "\n")

sys.excepthook = _global_excepthook
if __name__ == "__main__":
    run_app(sys.argv[1] if len(sys.argv) > 1 else None)
