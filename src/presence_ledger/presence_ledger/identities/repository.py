from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Identity


class IdentityRepository(Protocol):
    """Roster storage interface.

    Services depend on this protocol, never on a concrete backend.
    """

    def get(self, identity_id: str) -> Optional[Identity]:
        raise NotImplementedError

    def list(self) -> Sequence[Identity]:
        raise NotImplementedError

    def upsert(self, identity: Identity) -> Identity:
        """Insert, or replace every field of an existing identity with the same id."""

        raise NotImplementedError

    def delete(self, identity_id: str) -> bool:
        raise NotImplementedError
