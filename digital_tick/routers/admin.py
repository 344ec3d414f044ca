"""Admin usage endpoint."""

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Query, status

from digital_tick.config import Settings
from digital_tick.dependencies.services import get_app_settings, get_chat_service
from digital_tick.schemas.usage import UsageSnapshotResponse, UserUsageEntry
from digital_tick.services.core.chat import ChatService
from digital_tick.services.utils.period import current_period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def verify_admin_key(
    key: str | None = Query(default=None),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Check the admin credential against the configured key."""
    if not settings.admin_key:
        logger.error("Admin usage requested but ADMIN_KEY is not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Admin key not configured",
        )
    if not key or not secrets.compare_digest(key.encode(), settings.admin_key.encode()):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin key")


@router.get(
    "/usage",
    response_model=UsageSnapshotResponse,
    dependencies=[Depends(verify_admin_key)],
)
def get_usage(service: ChatService = Depends(get_chat_service)) -> UsageSnapshotResponse:
    """Usage for every identity in the current accounting period, highest first."""
    period = current_period(service.clock())
    counts = service.ledger.period_snapshot(period)
    users = [
        UserUsageEntry(user_key=identity, count=count)
        for identity, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
    return UsageSnapshotResponse(period=period, total_users=len(users), users=users)
