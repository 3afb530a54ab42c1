"""Daily batch job that precomputes and stores scores for every user."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from shift_coach.domain.scores import DailyScores
from shift_coach.services.scoring import ScoringService

_logger = logging.getLogger(__name__)


class ScoreRepository(Protocol):
    """Persistence interface for precomputed scores."""

    def list_user_ids(self) -> list[UUID]:
        """Return every user with a profile."""

    def save_daily_scores(self, scores: DailyScores) -> None:
        """Upsert one user's scores for a day."""


@dataclass
class PrecomputeSummary:
    """Outcome of one batch run."""

    processed: list[UUID] = field(default_factory=list)
    failed: list[UUID] = field(default_factory=list)


@dataclass
class DailyScoreJob:
    """Computes and stores the day's scores user by user.

    A failure for one user is logged and recorded; the job moves on to the
    next user.
    """

    scoring_service: ScoringService
    repository: ScoreRepository
    allowed_user_ids: set[str] | None = None

    def run(self, now: datetime | None = None) -> PrecomputeSummary:
        """Precompute scores for every (allowed) user."""
        summary = PrecomputeSummary()
        user_ids = [
            user_id
            for user_id in self.repository.list_user_ids()
            if self.allowed_user_ids is None or str(user_id) in self.allowed_user_ids
        ]
        _logger.info("Precompute started: users=%s", len(user_ids))
        for user_id in user_ids:
            try:
                scores = self.scoring_service.get_daily_scores(user_id, now)
                self.repository.save_daily_scores(scores)
            except Exception:
                _logger.exception("Precompute failed: user_id=%s", user_id)
                summary.failed.append(user_id)
                continue
            summary.processed.append(user_id)
        _logger.info(
            "Precompute finished: processed=%s failed=%s",
            len(summary.processed),
            len(summary.failed),
        )
        return summary
