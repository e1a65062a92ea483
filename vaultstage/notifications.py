"""
Operator notifications.

The controller and the deployment engine report every outcome through a
Notifier instead of printing. Front ends subscribe to render them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()


class NotificationType(str, Enum):
    """Severity of a notification."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Notification(BaseModel):
    """A single user-facing message."""

    message: str
    type: NotificationType = NotificationType.INFO
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


Subscriber = Callable[[Notification], None]


class Notifier:
    """
    Collects notifications and fans them out to subscribers.

    Example:
        ```python
        notifier = Notifier()
        notifier.subscribe(lambda n: print(n.type.value, n.message))
        notifier.warning("No staged items to deploy!")
        ```
    """

    def __init__(self) -> None:
        self.history: List[Notification] = []
        self._subscribers: List[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def notify(self, message: str, type: NotificationType = NotificationType.INFO) -> Notification:
        notification = Notification(message=message, type=NotificationType(type))
        self.history.append(notification)

        log = logger.error if notification.type is NotificationType.ERROR else logger.info
        log("notification", kind=notification.type.value, message=message)

        for subscriber in self._subscribers:
            subscriber(notification)
        return notification

    def success(self, message: str) -> Notification:
        return self.notify(message, NotificationType.SUCCESS)

    def error(self, message: str) -> Notification:
        return self.notify(message, NotificationType.ERROR)

    def warning(self, message: str) -> Notification:
        return self.notify(message, NotificationType.WARNING)

    def info(self, message: str) -> Notification:
        return self.notify(message, NotificationType.INFO)

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None

    def of_type(self, type: NotificationType) -> List[Notification]:
        return [n for n in self.history if n.type is type]

    def clear(self) -> None:
        self.history.clear()
