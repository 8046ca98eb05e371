# packaging/macos/dmg_settings.py
# Settings for dmgbuild. Build the app first:
#   python freeze_setup.py bdist_mac
#   dmgbuild -s packaging/macos/dmg_settings.py "NdefTextQT5" build/NdefTextQT5.dmg

import os

volume_name = "NdefTextQT5"
format = "UDZO"

window_rect = ((200, 200), (540, 380))
default_view = "icon-view"
icon_size = 128
text_size = 12

symlinks = {"Applications": "/Applications"}

# explicit path: -D APP_PATH="build/NdefTextQT5.app"
APP_PATH = globals().get("APP_PATH")


def _find_app_under_build():
    for root, dirs, _ in os.walk("build"):
        for d in dirs:
            if d.endswith(".app"):
                return os.path.join(root, d)
    raise FileNotFoundError(
        "No .app found under 'build/'. Build first with:\n"
        "  python freeze_setup.py bdist_mac"
    )


if not APP_PATH:
    APP_PATH = _find_app_under_build()

APP_NAME = os.path.basename(APP_PATH)

files = [(APP_PATH, APP_NAME)]

icon_locations = {
    APP_NAME: (140, 200),
    "Applications": (400, 200),
}
