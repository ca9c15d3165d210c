"""Port: ID and token generation strategies."""

from __future__ import annotations

import secrets
import uuid
from typing import Protocol, runtime_checkable


@runtime_checkable
class SelectorTokenProvider(Protocol):
    """Generate a short render-time token binding a selector to its panels."""

    def new_token(self) -> str: ...


@runtime_checkable
class UuidProvider(Protocol):
    """Generate a UUID for a newly saved placement."""

    def new_uuid(self, placement_id: str) -> str: ...


# ---------------------------------------------------------------------------
# Default implementations (pure stdlib, no infra deps)
# ---------------------------------------------------------------------------


class RandomSelectorTokenProvider:
    """URL-safe base64 of ``nbytes`` random bytes."""

    def __init__(self, nbytes: int = 2) -> None:
        self._nbytes = nbytes

    def new_token(self) -> str:
        return secrets.token_urlsafe(self._nbytes)


class Uuid4Provider:
    """Uses uuid4; the placement id is ignored."""

    def new_uuid(self, placement_id: str) -> str:
        return str(uuid.uuid4())
