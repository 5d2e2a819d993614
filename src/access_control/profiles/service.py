from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from math import ceil
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import DuplicateType
from ..core.exceptions import DuplicateProfileError, NotFoundError, ValidationError
from .duplicate_gate import DuplicateGate
from .model import NewProfile, Profile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfilePage:
    profiles: Sequence[Profile]
    total: int
    page: int
    total_pages: int


class ProfileService:
    """Use cases: register, look up and remove identity profiles."""

    def __init__(self, profiles: ProfileRepository, gate: DuplicateGate):
        self._profiles = profiles
        self._gate = gate

    def register(
        self,
        *,
        external_id: Optional[str],
        display_name: Optional[str],
        template: Optional[bytes],
        thumbnail: Optional[bytes] = None,
        now: datetime | None = None,
    ) -> int:
        """Persist a new profile after both duplicate checks pass.

        The external id lookup runs first and does not depend on the template.
        The template scan fails closed: if it cannot run, nothing is saved.
        """

        display_name = require_non_empty(display_name, "name")
        external_id = require_non_empty(external_id, "lagId")
        if not template:
            raise ValidationError("faceTemplate is required")

        existing = self._profiles.get_by_external_id(external_id)
        if existing:
            logger.info("Duplicate LAG ID %s already registered to %s", external_id, existing.display_name)
            raise DuplicateProfileError(
                f"LAG ID '{external_id}' is already registered to {existing.display_name}",
                duplicate_type=DuplicateType.EXTERNAL_ID,
                existing=existing,
            )

        result = self._gate.check(template)
        if result.is_duplicate:
            matched = result.matched_profile
            raise DuplicateProfileError(
                f"Face already registered to {matched.display_name} ({matched.external_id})",
                duplicate_type=DuplicateType.TEMPLATE,
                existing=matched,
                similarity=result.similarity,
            )

        profile_id = self._profiles.create_profile(
            NewProfile(
                external_id=external_id,
                display_name=display_name,
                template=template,
                thumbnail=thumbnail,
            ),
            now=now or now_local(),
        )
        logger.info("Profile saved: %s (%s) id=%s", display_name, external_id, profile_id)
        return profile_id

    def list_all(self) -> Sequence[Profile]:
        return self._profiles.list_all()

    def list_page(self, *, page: int, limit: int) -> ProfilePage:
        total = self._profiles.count()
        rows = self._profiles.list_page(offset=(page - 1) * limit, limit=limit)
        return ProfilePage(profiles=rows, total=total, page=page, total_pages=ceil(total / limit))

    def count(self) -> int:
        return self._profiles.count()

    def get(self, profile_id: int) -> Profile:
        profile = self._profiles.get_by_id(profile_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def get_by_external_id(self, external_id: str) -> Profile:
        profile = self._profiles.get_by_external_id(external_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def delete(self, profile_id: int) -> None:
        if not self._profiles.delete_by_id(profile_id):
            raise NotFoundError("Profile not found")
        logger.info("Profile %s deleted", profile_id)

    def delete_by_external_id(self, external_id: str) -> None:
        if not self._profiles.delete_by_external_id(external_id):
            raise NotFoundError("Profile not found")
        logger.info("Profile with LAG ID %s deleted", external_id)
