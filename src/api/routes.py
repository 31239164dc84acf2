"""FastAPI routes for health and sensor analysis."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from analysis.errors import AnalysisError
from analysis.schemas import SensorReading
from analysis.service import SensorAnalyzer
from api.dependencies import get_analyzer
from api.schemas import HealthResponse

LOGGER = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


@router.get("/submit", response_class=PlainTextResponse)
async def submit_readings(
    ph: float,
    tds: float,
    orp: float,
    color: float,
    mq3: str = "",
    mq135: str = "",
    mq136: str = "",
    mq138: str = "",
) -> str:
    """Echo raw readings back; used to check the sensor rig can reach the server."""

    result = ph * tds * orp * color
    readings = ",".join(
        _format_number(v) if isinstance(v, float) else v
        for v in (ph, tds, orp, color, mq3, mq135, mq136, mq138)
    )
    return f"submitted {readings} and results are {_format_number(result)}"


@router.post("/analyze")
async def analyze(
    reading: SensorReading,
    analyzer: SensorAnalyzer = Depends(get_analyzer),
):
    try:
        return await analyzer.analyze(reading)
    except AnalysisError as exc:
        LOGGER.warning("Analysis failed | status=%s | %s", exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())
