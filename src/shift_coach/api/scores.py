"""Per-user score endpoints with API token auth."""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from shift_coach.containers import AppContainer
    from shift_coach.services.scoring import ScoringService

router = APIRouter(prefix="/users/{user_id}/scores", tags=["scores"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _scoring(request: Request) -> ScoringService:
    container: AppContainer = request.app.state.container
    return container.scoring_service


def _as_of(at: datetime | None) -> datetime | None:
    """Treat a naive ``at`` query value as UTC."""
    if at is not None and at.tzinfo is None:
        return at.replace(tzinfo=UTC)
    return at


@router.get("/daily", dependencies=[Depends(require_api_token)])
async def daily_scores(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return every score for the user's current day."""
    return asdict(_scoring(request).get_daily_scores(user_id, _as_of(at)))


@router.get("/sleep-deficit", dependencies=[Depends(require_api_token)])
async def sleep_deficit(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return the weekly sleep deficit."""
    return asdict(_scoring(request).get_sleep_deficit(user_id, _as_of(at)))


@router.get("/circadian", dependencies=[Depends(require_api_token)])
async def circadian(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return circadian phase and alignment."""
    return asdict(_scoring(request).get_circadian(user_id, _as_of(at)))


@router.get("/social-jetlag", dependencies=[Depends(require_api_token)])
async def social_jetlag(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return sleep-midpoint drift from the personal baseline."""
    return asdict(_scoring(request).get_social_jetlag(user_id, _as_of(at)))


@router.get("/shift-rhythm", dependencies=[Depends(require_api_token)])
async def shift_rhythm(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return the 0-10 shift rhythm score."""
    return asdict(_scoring(request).get_shift_rhythm(user_id, _as_of(at)))


@router.get("/shift-lag", dependencies=[Depends(require_api_token)])
async def shift_lag(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return the 0-100 ShiftLag score."""
    scoring = _scoring(request)
    as_of = _as_of(at)
    circadian_phase = scoring.get_circadian(user_id, as_of)
    midpoint = circadian_phase.sleep_midpoint_minutes
    return asdict(
        scoring.get_shift_lag(
            user_id, as_of, midpoint / 60 if midpoint is not None else None
        )
    )


@router.get("/binge-risk", dependencies=[Depends(require_api_token)])
async def binge_risk(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return today's binge risk."""
    return asdict(_scoring(request).get_binge_risk(user_id, _as_of(at)))


@router.get("/tonight-target", dependencies=[Depends(require_api_token)])
async def tonight_target(
    user_id: UUID, request: Request, at: datetime | None = None
) -> dict[str, object]:
    """Return tonight's recommended sleep duration."""
    return asdict(_scoring(request).get_tonight_target(user_id, _as_of(at)))
