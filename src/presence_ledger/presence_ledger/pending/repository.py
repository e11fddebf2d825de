from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PendingSignout


class PendingRepository(Protocol):
    def get(self, pending_id: str) -> Optional[PendingSignout]:
        raise NotImplementedError

    def list(self) -> Sequence[PendingSignout]:
        raise NotImplementedError

    def find_by_token(self, token: str) -> Optional[PendingSignout]:
        raise NotImplementedError

    def save(self, record: PendingSignout) -> PendingSignout:
        """Insert or replace by ``pending_id``."""

        raise NotImplementedError
