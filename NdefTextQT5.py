# NdefTextQT5.py
# Launcher used by freeze_setup.py (cx_Freeze needs a script file as entry point).
import sys
from ndef_text_qt5.app import run_app

if __name__ == "__main__":
    run_app(sys.argv[1] if len(sys.argv) > 1 else None)
