"""User interface components"""

from .notifications import BufferedNotifier, ConsoleNotifier, Notification, Notifier
from .console import ConsoleShell, render_table

__all__ = [
    "Notification",
    "Notifier",
    "ConsoleNotifier",
    "BufferedNotifier",
    "ConsoleShell",
    "render_table",
]
