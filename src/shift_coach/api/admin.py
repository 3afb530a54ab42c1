"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from shift_coach.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/precompute", dependencies=[Depends(require_admin)])
def precompute(request: Request, at: datetime | None = None) -> dict[str, object]:
    """Precompute and store today's scores for every user."""
    container: AppContainer = request.app.state.container
    if at is not None and at.tzinfo is None:
        at = at.replace(tzinfo=UTC)
    summary = container.daily_score_job.run(at)
    return {
        "processed": len(summary.processed),
        "failed": [str(user_id) for user_id in summary.failed],
    }
