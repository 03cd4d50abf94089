"""API routes implementation."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, HTTPException, status

from .schemas import (
    CreateLinkRequest,
    CreateLinkResponse,
    HealthResponse,
    ErrorResponse,
)
from shortlink.common.urls import (
    build_base_url,
    build_short_url,
    get_forwarded_path_prefix,
    join_path_prefix,
    location_header_value,
)

router = APIRouter()


@router.get(
    "/api/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check",
    description="Check if the link store (and cache, when enabled) answer.",
)
async def health_check(request: Request):
    """Health check endpoint for load balancers and monitoring."""
    service = request.app.state.service

    health = await service.health_check()

    return HealthResponse(
        status="healthy" if health["overall"] else "unhealthy",
        database="healthy" if health["database"] else "unhealthy",
        cache="healthy" if health["cache"] else "unhealthy",
        timestamp=datetime.now(timezone.utc),
    )


@router.post(
    "/",
    response_model=CreateLinkResponse,
    tags=["Links"],
    responses={
        409: {"model": ErrorResponse, "description": "Generated key already exists"},
        422: {"model": ErrorResponse, "description": "Invalid request body"},
        503: {"model": ErrorResponse, "description": "Link store unavailable"},
    },
    summary="Create short link",
    description="Store the URL under a new key and return the full short URL.",
)
async def create_link(request: Request, body: CreateLinkRequest):
    """Create a short link."""
    service = request.app.state.service
    config = request.app.state.config

    key = await service.create(body.url)

    headers = dict(request.headers)
    base_url = build_base_url(
        headers=headers,
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
    )
    path_prefix = join_path_prefix(get_forwarded_path_prefix(headers), config.path_prefix)

    return CreateLinkResponse(
        url=build_short_url(key=key, base_url=base_url, path_prefix=path_prefix),
    )


@router.get(
    "/{key}",
    response_class=Response,
    status_code=status.HTTP_301_MOVED_PERMANENTLY,
    tags=["Links"],
    responses={
        301: {"description": "Redirect to the original URL"},
        404: {"model": ErrorResponse, "description": "Unknown key"},
        503: {"model": ErrorResponse, "description": "Link store unavailable"},
    },
    summary="Resolve short link",
    description="Get item uri from shorthand.",
)
async def resolve_link(request: Request, key: str):
    """Redirect to the URL stored under ``key``."""
    service = request.app.state.service

    uri = await service.resolve(key)

    if uri is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Key '{key}' not found",
        )

    # Only characters a header cannot carry are encoded.
    return Response(
        status_code=status.HTTP_301_MOVED_PERMANENTLY,
        headers={"location": location_header_value(uri)},
    )
