"""Repository interfaces for Nexus CLI.

These abstract base classes are the "Ports" of the sync engine. The SQLite
adapters in ``nexus_cli.adapters.sqlite`` implement them.
"""

from .repository import EventRepository, NotificationRepository, UserRepository

__all__ = [
    "UserRepository",
    "EventRepository",
    "NotificationRepository",
]
