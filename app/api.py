"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    AuditListResponse,
    AuditOutcome,
    ErrorDetail,
    ProvidersResponse,
    WeatherReadingResponse,
)
from services.errors import ProviderErrorKind, WeatherError, WeatherErrorKind
from services.weather import WeatherService, build_default_service

router = APIRouter()

_PROVIDER_STATUS = {
    ProviderErrorKind.city_not_found: status.HTTP_404_NOT_FOUND,
    ProviderErrorKind.invalid_input: status.HTTP_400_BAD_REQUEST,
    ProviderErrorKind.upstream_unavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    ProviderErrorKind.upstream_malformed_response: status.HTTP_502_BAD_GATEWAY,
    ProviderErrorKind.missing_credential: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"description": "Invalid city, source, or configuration."},
    status.HTTP_404_NOT_FOUND: {"description": "City not found by the provider."},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"description": "Provider is missing credentials."},
    status.HTTP_502_BAD_GATEWAY: {"description": "Provider returned an unusable payload."},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "Provider is unavailable."},
}


def get_service() -> WeatherService:
    return build_default_service()


def status_for_error(error: WeatherError) -> int:
    if error.kind is WeatherErrorKind.provider_failed and error.provider_error is not None:
        return _PROVIDER_STATUS[error.provider_error]
    return status.HTTP_400_BAD_REQUEST


def _fetch_reading(
    service: WeatherService,
    city: str,
    source: Optional[str],
    config: Optional[str],
) -> WeatherReadingResponse:
    try:
        reading = service.get_weather(city, source, config)
    except WeatherError as exc:
        detail = ErrorDetail(
            error=exc.kind.value,
            provider_error=exc.provider_error.value if exc.provider_error else None,
            message=exc.message,
        )
        raise HTTPException(
            status_code=status_for_error(exc),
            detail=detail.model_dump(),
        ) from exc
    return WeatherReadingResponse.from_reading(reading)


@router.get(
    "/api/weather/{city}",
    response_model=WeatherReadingResponse,
    responses=_ERROR_RESPONSES,
    summary="Current weather for a city, normalized to Celsius and km/h.",
)
def get_weather(
    city: str,
    source: Optional[str] = Query(None, description="Provider name; defaults to mock."),
    config: Optional[str] = Query(None, description="Provider configuration as a JSON object."),
    service: WeatherService = Depends(get_service),
) -> WeatherReadingResponse:
    return _fetch_reading(service, city, source, config)


@router.get(
    "/api/weather",
    response_model=WeatherReadingResponse,
    responses=_ERROR_RESPONSES,
    summary="Current weather for a city passed as a query parameter.",
)
def get_weather_by_query(
    city: str = Query("", description="City name."),
    source: Optional[str] = Query(None, description="Provider name; defaults to mock."),
    config: Optional[str] = Query(None, description="Provider configuration as a JSON object."),
    service: WeatherService = Depends(get_service),
) -> WeatherReadingResponse:
    return _fetch_reading(service, city, source, config)


@router.get(
    "/api/providers",
    response_model=ProvidersResponse,
    summary="List the registered weather sources.",
)
async def list_providers(
    service: WeatherService = Depends(get_service),
) -> ProvidersResponse:
    return ProvidersResponse(
        sources=service.registry.names(),
        default=service.registry.default,
    )


@router.get(
    "/api/audit",
    response_model=AuditListResponse,
    summary="Recent audit records, newest first.",
)
async def list_audit_records(
    city: Optional[str] = Query(None),
    source: Optional[str] = Query(None),
    outcome: Optional[AuditOutcome] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    service: WeatherService = Depends(get_service),
) -> AuditListResponse:
    records = service.audit_log.query(city=city, source=source, outcome=outcome, limit=limit)
    return AuditListResponse(records=records)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
