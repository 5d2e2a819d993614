from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.constants import DEFAULT_DUPLICATE_THRESHOLD
from ..core.exceptions import DuplicateCheckUnavailable
from ..matching.similarity import template_similarity
from .model import Profile
from .repository import TemplateSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateCheckResult:
    is_duplicate: bool
    similarity: float
    matched_profile: Optional[Profile] = None


class DuplicateGate:
    """Decides whether a candidate template collides with a stored identity.

    Every stored profile is compared with the candidate (a full O(n) scan per
    registration). The best match wins; among equal scores the first profile
    in scan order is kept. The gate is read-only and is not isolated from
    concurrent registrations: two near-identical templates registered at the
    same moment can both pass. Only the external id has a storage-level
    guarantee.
    """

    def __init__(
        self,
        source: TemplateSource,
        *,
        threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
        matcher: Callable[[Optional[bytes], Optional[bytes]], float] = template_similarity,
    ):
        self._source = source
        self._threshold = float(threshold)
        self._matcher = matcher

    @property
    def threshold(self) -> float:
        return self._threshold

    def check(self, candidate: Optional[bytes]) -> DuplicateCheckResult:
        try:
            profiles = list(self._source.scan_templates())
        except Exception as e:
            logger.exception("Duplicate check could not load profiles")
            raise DuplicateCheckUnavailable("Duplicate check unavailable") from e

        logger.debug(
            "Checking template (%d bytes) against %d profiles",
            len(candidate or b""),
            len(profiles),
        )

        best_score = 0.0
        best_profile: Optional[Profile] = None
        for profile in profiles:
            score = self._matcher(candidate, profile.template)
            if best_profile is None or score > best_score:
                best_score = score
                best_profile = profile

        if best_profile is not None and best_score >= self._threshold:
            logger.info(
                "Duplicate template detected: %s (%s) %.2f%% similar",
                best_profile.display_name,
                best_profile.external_id,
                best_score,
            )
            return DuplicateCheckResult(is_duplicate=True, similarity=best_score, matched_profile=best_profile)

        return DuplicateCheckResult(is_duplicate=False, similarity=best_score)
