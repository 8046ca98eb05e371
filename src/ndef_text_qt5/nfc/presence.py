# src/ndef_text_qt5/nfc/presence.py
# Tag discovery: pyscard CardMonitor events forwarded to the GUI thread as Qt signals.
from PyQt5 import QtCore
from smartcard.CardMonitoring import CardMonitor, CardObserver


class QtPresenceBridge(QtCore.QObject):
    """Qt side of the monitor; signals are delivered queued to the GUI thread."""
    presenceChanged = QtCore.pyqtSignal(bool)   # True = tag in field, False = field empty
    tagPlaced = QtCore.pyqtSignal(bytes)        # ATR of the tag that entered the field


class TagPresenceObserver(CardObserver):
    """Runs on the monitor thread; only emits signals, never touches the tag."""
    def __init__(self, bridge: QtPresenceBridge):
        super().__init__()
        self._bridge = bridge

    def update(self, observable, actions):
        (added, removed) = actions
        for card in added or []:
            self._bridge.tagPlaced.emit(bytes(getattr(card, "atr", None) or b""))
        if added:
            self._bridge.presenceChanged.emit(True)
        if removed:
            self._bridge.presenceChanged.emit(False)


def start_presence_monitor(bridge: QtPresenceBridge):
    """Create and start a CardMonitor with observer; returns (monitor, observer)."""
    monitor = CardMonitor()
    observer = TagPresenceObserver(bridge)
    monitor.addObserver(observer)
    return monitor, observer


def stop_presence_monitor(monitor, observer) -> None:
    monitor.deleteObserver(observer)
