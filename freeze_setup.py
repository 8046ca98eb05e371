# freeze_setup.py
# Cross-platform cx_Freeze setup for Windows (.exe) and macOS (.app)
#   python freeze_setup.py build        -> build/exe.*/
#   python freeze_setup.py bdist_mac    -> build/NdefTextQT5.app (then dmgbuild, see packaging/macos)

from cx_Freeze import setup, Executable
from pathlib import Path
import sys

APP_NAME = "NdefTextQT5"
VERSION = "0.1.0"
BASE_DIR = Path(__file__).parent

build_exe_options = {
    "includes": [
        "PyQt5.QtCore",
        "PyQt5.QtGui",
        "PyQt5.QtWidgets",
        "configparser",
        "logging",
        # --- smartcard (pyscard) ---
        "smartcard",
        "smartcard.Exceptions",
        "smartcard.System",
        "smartcard.scard",
        "smartcard.CardMonitoring",
        "smartcard.CardConnection",
    ],
    "packages": ["ndef_text_qt5"],
    "excludes": ["tkinter", "unittest", "tests"],
    # packaged defaults are read through importlib.resources
    "include_files": [
        (str(BASE_DIR / "src" / "ndef_text_qt5" / "config" / "ndef_text_qt5.ini"),
         "lib/ndef_text_qt5/config/ndef_text_qt5.ini"),
    ],
    "zip_include_packages": ["encodings", "importlib", "PyQt5"],
    "zip_exclude_packages": ["ndef_text_qt5"],
    "optimize": 1,
    "silent_level": 1,
}

if sys.platform == "win32":
    base = "Win32GUI"
    icon = BASE_DIR / "packaging" / "windows" / "app.ico"
    target_name = f"{APP_NAME}.exe"
else:
    base = None
    icon = BASE_DIR / "packaging" / "macos" / "app.icns"
    target_name = APP_NAME

executables = [
    Executable(
        script="NdefTextQT5.py",
        base=base,
        target_name=target_name,
        icon=str(icon) if icon.exists() else None,
    )
]

bdist_mac_options = {
    "bundle_name": APP_NAME,
    "iconfile": str(icon) if icon.exists() else None,
}

setup(
    name=APP_NAME,
    version=VERSION,
    description="PyQt5 tool to read and write NDEF text on NFC Type 2 tags",
    options={
        "build_exe": build_exe_options,
        "bdist_mac": bdist_mac_options,
    },
    executables=executables,
)
