"""Health endpoint — database reachability and the active release."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.core.dependencies import get_async_session
from broadband_api.schemas.lookup import HealthResponse
from broadband_api.services.availability_service import get_active_vintage

health_router = APIRouter(tags=["health"])


@health_router.get("/health", response_model=HealthResponse)
async def health_check(
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> HealthResponse | JSONResponse:
    """Report the active release and when it finished importing."""
    try:
        vintage = await get_active_vintage(session)
    except SQLAlchemyError as e:
        logger.error(f"Health check database query failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=HealthResponse(status="error").model_dump(mode="json"),
        )

    if vintage is None:
        return HealthResponse(status="ok")
    return HealthResponse(status="ok", data_vintage=vintage.vintage_id, last_import=vintage.import_completed_at)
