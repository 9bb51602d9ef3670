"""Response models for the basin term HTTP API."""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


class BasinModelInfo(BaseModel):
    id: str
    label: str


class BasinModelParameter(BasinModelInfo):
    z1p0: str
    z2p5: str


class BasinRegionInfo(BaseModel):
    id: str
    title: str


class BasinRegionSummary(BasinRegionInfo):
    defaultModel: str


class BasinRequestData(BaseModel):
    latitude: float
    longitude: float
    basinModel: Optional[BasinModelInfo] = None
    basinRegion: Optional[BasinRegionInfo] = None


class BasinValue(BaseModel):
    """A single horizon value; model is the field key it was read from"""
    model: str = ""
    value: Optional[float] = None


class BasinValues(BaseModel):
    z1p0: BasinValue
    z2p5: BasinValue


class BasinTermResponse(BaseModel):
    status: Literal["success"] = "success"
    name: str
    date: str
    url: str
    request: BasinRequestData
    response: BasinValues


class EnumParameter(BaseModel):
    label: str
    type: str = "string"
    values: List[BasinModelParameter]


class UsageResponse(BaseModel):
    status: Literal["usage"] = "usage"
    name: str
    description: str
    syntax: str
    basinModels: EnumParameter
    basinRegions: List[BasinRegionSummary]


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    name: str
    date: str
    url: str
    message: str
    error_type: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    basin_regions_configured: int = Field(..., ge=0)
    local_grids_loaded: int = Field(..., ge=0)
    arcgis_configured: bool
    details: Optional[Dict[str, Any]] = None
