from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from .model import NewProfile, Profile


class TemplateSource(Protocol):
    """Full-collection scan used by the duplicate gate.

    ``scan_templates`` is O(n) in the number of stored profiles and applies no
    filtering. An indexed nearest-neighbour lookup can replace it behind this
    interface without touching callers.
    """

    def scan_templates(self) -> Iterable[Profile]:
        raise NotImplementedError


class ProfileRepository(TemplateSource, Protocol):
    def get_by_id(self, profile_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_external_id(self, external_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def create_profile(self, profile: NewProfile, *, now: datetime) -> int:
        """Insert a profile.

        Raises DuplicateProfileError when the external id already exists.
        """

        raise NotImplementedError

    def list_all(self) -> Sequence[Profile]:
        raise NotImplementedError

    def list_page(self, *, offset: int, limit: int) -> Sequence[Profile]:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def delete_by_id(self, profile_id: int) -> bool:
        raise NotImplementedError

    def delete_by_external_id(self, external_id: str) -> bool:
        raise NotImplementedError
