import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from ...api_models import (
    BasinModelInfo, BasinModelParameter, BasinRegionInfo, BasinRegionSummary,
    BasinRequestData, BasinTermResponse, BasinValue, BasinValues, EnumParameter,
    ErrorResponse, UsageResponse
)
from ...basin.models import BasinModel, ResolvedTerm
from ...data_sources.base_source import ValueSource
from ...dependencies import ServiceContainer, get_service_container
from ...exceptions import InvalidCoordinate, UnknownModel, UpstreamUnavailable

logger = logging.getLogger(__name__)

SERVICE_NAME = "Basin Term Service"
SERVICE_DESCRIPTION = "Get basin terms"
SERVICE_SYNTAX = "{base}basin/{{local-data|arc-data}}?latitude={{latitude}}&longitude={{longitude}}&model={{basinModel}}"

DEFAULT_RATE_LIMIT = "60/minute"


def _rate_limit() -> str:
    try:
        return get_service_container().settings.RATE_LIMIT
    except RuntimeError:
        return DEFAULT_RATE_LIMIT


limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/basin", tags=["basin"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_response(
    request: Request,
    status_code: int,
    error: Exception,
    message: Optional[str] = None
) -> JSONResponse:
    body = ErrorResponse(
        name=SERVICE_NAME,
        date=_now(),
        url=str(request.url),
        message=message or getattr(error, "message", str(error)),
        error_type=type(error).__name__
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable query parameters in the service error envelope."""
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'request'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(f"Invalid basin term request parameters: {problems}")
    return error_response(request, 400, exc, message=f"Invalid request parameters: {problems}")


def build_usage(request: Request, container: ServiceContainer) -> UsageResponse:
    return UsageResponse(
        name=SERVICE_NAME,
        description=SERVICE_DESCRIPTION,
        syntax=SERVICE_SYNTAX.format(base=str(request.base_url)),
        basinModels=EnumParameter(
            label="Basin models",
            values=[BasinModelParameter(**model.to_dict()) for model in BasinModel]
        ),
        basinRegions=[BasinRegionSummary(**region.to_dict()) for region in container.region_dataset]
    )


def build_response(request: Request, term: ResolvedTerm) -> BasinTermResponse:
    """Build the success envelope; field keys are blank outside every basin."""
    if term.in_basin:
        model, region = term.model, term.region
        request_data = BasinRequestData(
            latitude=term.coordinate.latitude,
            longitude=term.coordinate.longitude,
            basinModel=BasinModelInfo(id=model.id, label=model.label),
            basinRegion=BasinRegionInfo(id=region.id, title=region.title)
        )
        values = BasinValues(
            z1p0=BasinValue(model=model.z1p0, value=term.z1p0),
            z2p5=BasinValue(model=model.z2p5, value=term.z2p5)
        )
    else:
        request_data = BasinRequestData(
            latitude=term.coordinate.latitude,
            longitude=term.coordinate.longitude
        )
        values = BasinValues(z1p0=BasinValue(), z2p5=BasinValue())

    return BasinTermResponse(
        name=SERVICE_NAME,
        date=_now(),
        url=str(request.url),
        request=request_data,
        response=values
    )


async def _resolve(
    request: Request,
    container: ServiceContainer,
    source: ValueSource,
    latitude: Optional[float],
    longitude: Optional[float],
    model: Optional[str]
):
    if not request.url.query:
        return build_usage(request, container)

    try:
        if latitude is None or longitude is None:
            raise InvalidCoordinate(latitude, longitude, "latitude and longitude are both required")

        term = await container.engine.resolve(
            latitude, longitude, source.granularity, source, model_id=model
        )
        return build_response(request, term)

    except (InvalidCoordinate, UnknownModel) as e:
        logger.warning(f"Invalid basin term request: {e}")
        return error_response(request, 400, e)
    except UpstreamUnavailable as e:
        logger.error(f"Upstream failure resolving basin term via {source.name}: {e}")
        return error_response(request, 504 if e.timed_out else 502, e)


@router.get("", summary="Basin term service usage")
async def get_usage(
    request: Request,
    container: ServiceContainer = Depends(get_service_container)
) -> UsageResponse:
    """Describe the service, its basin models and its basin regions."""
    return build_usage(request, container)


@router.get("/geojson", summary="Basin region boundaries as GeoJSON")
async def get_geojson(container: ServiceContainer = Depends(get_service_container)):
    return container.region_dataset.to_geojson()


@router.get("/local-data", summary="Basin terms from the local depth grids")
@limiter.limit(_rate_limit)
async def get_local_data(
    request: Request,
    latitude: Optional[float] = Query(None, description="Latitude in decimal degrees"),
    longitude: Optional[float] = Query(None, description="Longitude in decimal degrees"),
    model: Optional[str] = Query(None, description="Basin model id; defaults to the region's model"),
    container: ServiceContainer = Depends(get_service_container)
):
    """Resolve z1p0/z2p5 from the precomputed 0.01 degree grids; usage without a query."""
    return await _resolve(request, container, container.local_source, latitude, longitude, model)


@router.get("/arc-data", summary="Basin terms from the ArcGIS basin model service")
@limiter.limit(_rate_limit)
async def get_arc_data(
    request: Request,
    latitude: Optional[float] = Query(None, description="Latitude in decimal degrees"),
    longitude: Optional[float] = Query(None, description="Longitude in decimal degrees"),
    model: Optional[str] = Query(None, description="Basin model id; defaults to the region's model"),
    container: ServiceContainer = Depends(get_service_container)
):
    """Resolve z1p0/z2p5 by querying the ArcGIS basin depth service; usage without a query."""
    return await _resolve(request, container, container.remote_source, latitude, longitude, model)
