import time
from dataclasses import dataclass
from typing import List, Optional

TOAST_DURATION = 3.3


@dataclass
class Notification:
    message: str
    kind: str = ""
    shown_at: float = 0.0
    duration: float = TOAST_DURATION
    dismissed: bool = False

    @property
    def is_error(self) -> bool:
        return self.kind == "error"

    def visible(self, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        return not self.dismissed and now - self.shown_at < self.duration

    def dismiss(self) -> None:
        self.dismissed = True


class Notifier:
    """Single toast slot; a new message replaces the current one."""

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self.current: Optional[Notification] = None
        self.history: List[Notification] = []

    def show(self, message: str, kind: str = "") -> Notification:
        notification = Notification(message=message, kind=kind, shown_at=self.clock())
        self.current = notification
        self.history.append(notification)
        return notification

    def error(self, message: str) -> Notification:
        return self.show(message, "error")

    def active(self) -> Optional[Notification]:
        if self.current and self.current.visible(self.clock()):
            return self.current
        return None
