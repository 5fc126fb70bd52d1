"""Transient user-visible acknowledgements"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from core.models import CellChange

CELL_UPDATE_DURATION_MS = 2000
AI_MESSAGE_DURATION_MS = 4000


@dataclass
class Notification:
    """One toast-style message"""
    title: str
    description: str
    duration_ms: int = CELL_UPDATE_DURATION_MS


class Notifier(ABC):
    """Abstract notification sink"""

    @abstractmethod
    def notify(self, notification: Notification):
        """Show a notification"""
        pass

    def cell_updated(self, change: CellChange):
        """Acknowledge a store update"""
        self.notify(Notification(
            title="Cell Updated",
            description=f"{change.address} = {change.value}",
            duration_ms=CELL_UPDATE_DURATION_MS,
        ))


class ConsoleNotifier(Notifier):
    """Console-based notifications"""

    def notify(self, notification: Notification):
        print(f"[✓] {notification.title}: {notification.description}")


class BufferedNotifier(Notifier):
    """Collects notifications until drained; used by the HTTP API"""

    def __init__(self):
        self.pending: List[Notification] = []

    def notify(self, notification: Notification):
        self.pending.append(notification)

    def drain(self) -> List[Notification]:
        drained, self.pending = self.pending, []
        return drained
