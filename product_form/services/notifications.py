import time
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from product_form.config import settings

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass
class Notification:
    kind: str
    message: str
    created_at: float = field(default_factory=time.monotonic)

    def age(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.created_at

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out.pop("created_at")
        return out


class Notifier:
    """
    Toast-style channel: emit and forget. Messages stay "active" for
    TOAST_AUTO_CLOSE_SECONDS, after which they no longer show up in active().
    """

    def __init__(self):
        self._items: List[Notification] = []

    def _emit(self, kind: str, message: str) -> Notification:
        n = Notification(kind=kind, message=message)
        self._items.append(n)
        logger.info("[%s] %s", kind, message)
        return n

    def success(self, message: str) -> Notification:
        return self._emit(SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._emit(ERROR, message)

    @property
    def history(self) -> List[Notification]:
        return list(self._items)

    def active(self, now: Optional[float] = None) -> List[Notification]:
        ttl = settings.TOAST_AUTO_CLOSE_SECONDS
        now = now if now is not None else time.monotonic()
        # expired toasts are dismissed for good
        self._items = [n for n in self._items if n.age(now) < ttl]
        return list(self._items)

    def drain(self) -> List[Notification]:
        items, self._items = self._items, []
        return items
