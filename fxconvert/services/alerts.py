"""User-visible, non-blocking notifications.

Every failure that reaches the session boundary becomes one of these instead
of stopping the session. Alert schema (dict):
  level: 'info' | 'warn' | 'critical'
  message: human readable string
  created_at: ISO timestamp
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List

logger = logging.getLogger("fxconvert.alerts")

LEVELS = ("info", "warn", "critical")


class AlertQueue:
    def __init__(self, maxlen: int = 50):
        self._items: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def push(self, message: str, level: str = "info") -> None:
        if level not in LEVELS:
            raise ValueError(f"unknown alert level '{level}'")
        self._items.append(
            {
                "level": level,
                "message": message,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        log = logger.error if level == "critical" else logger.info
        log("alert [%s]: %s", level, message)

    def peek(self) -> List[Dict[str, Any]]:
        return list(self._items)

    def drain(self) -> List[Dict[str, Any]]:
        items = list(self._items)
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["AlertQueue", "LEVELS"]
