from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Profile:
    """Domain entity: a registered identity.

    Note: plain data object, no storage access here.
    """

    profile_id: int
    external_id: str
    display_name: str
    template: bytes
    created_at: datetime
    updated_at: datetime
    thumbnail: Optional[bytes] = None


@dataclass(frozen=True)
class NewProfile:
    """A validated registration waiting to be persisted."""

    external_id: str
    display_name: str
    template: bytes
    thumbnail: Optional[bytes] = None
