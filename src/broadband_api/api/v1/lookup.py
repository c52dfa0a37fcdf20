"""Lookup endpoint — providers available at a location."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from broadband_api.core.dependencies import get_async_session, get_resolver
from broadband_api.schemas.lookup import LookupData, LookupRequest, LookupResponse, ProviderResult
from broadband_api.services.availability_service import get_active_vintage
from broadband_api.services.resolver_service import InputError, Outcome, Resolver

lookup_router = APIRouter(tags=["lookup"])


def build_lookup_response(outcome: Outcome, data_vintage: str | None) -> LookupResponse:
    """Render a resolver outcome as the response envelope."""
    if isinstance(outcome, InputError):
        return LookupResponse(success=False, error=outcome.message)

    return LookupResponse(
        success=True,
        data=LookupData(
            providers=[ProviderResult.from_availability(p) for p in outcome.providers],
            h3_index=outcome.cell_id,
            block_geoid=getattr(outcome, "block_geoid", None),
            data_vintage=data_vintage,
            lookup_method=outcome.method,
            note=getattr(outcome, "note", None),
        ),
    )


@lookup_router.post(
    "/lookup",
    response_model=LookupResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": LookupResponse}},
)
async def lookup(
    request: LookupRequest,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    resolver: Resolver = Depends(get_resolver),  # noqa: B008
) -> LookupResponse | JSONResponse:
    """Resolve coordinates or an address to the broadband providers serving it."""
    outcome = await resolver.resolve(session, lat=request.lat, lng=request.lng, address=request.address)

    if isinstance(outcome, InputError):
        body = build_lookup_response(outcome, None)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body.model_dump(exclude_none=True))

    vintage = await get_active_vintage(session)
    return build_lookup_response(outcome, vintage.vintage_id if vintage else None)
