import logging
import time
from typing import Callable, List
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    message: str
    created_at: float
    is_error: bool = False


class Notifier:
    """Информационные уведомления, которые сами исчезают через ttl секунд"""

    def __init__(self, ttl: float = 2.5, clock: Callable[[], float] = time.monotonic):
        self._ttl = ttl
        self._clock = clock
        self._items: List[Notification] = []

    def notify(self, message: str) -> Notification:
        logger.info(f"Уведомление: {message}")
        return self._push(message, is_error=False)

    def error(self, message: str) -> Notification:
        logger.warning(f"Уведомление об ошибке: {message}")
        return self._push(message, is_error=True)

    def active(self) -> List[Notification]:
        self._prune()
        return list(self._items)

    def _prune(self) -> None:
        now = self._clock()
        self._items = [n for n in self._items if now - n.created_at < self._ttl]

    def _push(self, message: str, is_error: bool) -> Notification:
        self._prune()
        notification = Notification(message=message, created_at=self._clock(), is_error=is_error)
        self._items.append(notification)
        return notification
