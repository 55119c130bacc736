from __future__ import annotations

"""Rate cache abstraction.

The cache is an external document store holding one snapshot under a fixed
key with last-write-wins semantics. ``load`` returns None when nothing has been
written yet; backend errors surface as ``PersistenceFailure``.
"""
from abc import ABC, abstractmethod
from typing import Optional

from fxconvert.models.rates import RateSnapshot


class RateCache(ABC):
    @abstractmethod
    async def save(self, snapshot: RateSnapshot) -> None:
        raise NotImplementedError

    @abstractmethod
    async def load(self) -> Optional[RateSnapshot]:
        raise NotImplementedError
