"""Service-wide cap on simultaneous audits."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterator

from seo_scout.errors import AuditsBusy


class AuditLimiter:
    """Non-blocking counting semaphore.

    There is no waiting queue: when every slot is taken the caller gets
    :class:`AuditsBusy` and is expected to try again later.
    """

    def __init__(self, max_active: int = 2) -> None:
        if max_active <= 0:
            raise ValueError("max_active must be > 0")
        self.max_active = max_active
        self._active = 0

    @property
    def active(self) -> int:
        return self._active

    def try_acquire(self) -> bool:
        if self._active >= self.max_active:
            return False
        self._active += 1
        return True

    def release(self) -> None:
        self._active = max(0, self._active - 1)

    def status(self) -> Dict[str, int]:
        return {"active": self._active, "max": self.max_active}

    @contextmanager
    def slot(self, lang: str = "en") -> Iterator[None]:
        if not self.try_acquire():
            raise AuditsBusy(lang=lang)
        try:
            yield
        finally:
            self.release()


__all__ = ["AuditLimiter"]
