import os
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

from models.errors import InvalidSettings
from models.forecast_request import ForecastRequest
from services.forecast_dto import ForecastResponseDTO, ForecastSummaryDTO
from services.forecast_service import build_forecast
from services.projection_service import (
    DEFAULT_USER,
    calculate_forecast,
    calculate_forecast_with_currency,
    upcoming_pay_periods,
)

router = APIRouter()

DEFAULT_CURRENCY = os.getenv("BUDGET_CURRENCY", "USD")


def _parse_as_of(as_of_date):
    if not as_of_date:
        return None
    try:
        return date.fromisoformat(as_of_date)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD.")


def _settings_error(e):
    return JSONResponse(
        status_code=409,
        content={"error": str(e), "needs_configuration": True},
    )


@router.get("/forecast")
def get_forecast(as_of_date: Optional[str] = Query(None), user_id: str = Query(DEFAULT_USER)):
    """
    Return the pay-cycle forecast for the stored budget.

    Query Parameters:
        as_of_date (optional): Reference date in ISO format (YYYY-MM-DD).
                              Defaults to today if not provided.
        user_id (optional): Whose records to read.

    Returns:
        ForecastResponseDTO: discretionary, reserved bills, projected bills,
        goal progress and any diagnostics for skipped items.
    """
    as_of = _parse_as_of(as_of_date)

    try:
        forecast = calculate_forecast(user_id=user_id, as_of=as_of)
    except InvalidSettings as e:
        return _settings_error(e)

    return asdict(ForecastResponseDTO.from_forecast(forecast))


@router.post("/forecast/preview")
def preview_forecast(request: ForecastRequest):
    """Forecast an ad-hoc snapshot without touching the store."""
    try:
        forecast = build_forecast(request.to_input())
    except InvalidSettings as e:
        return _settings_error(e)

    return asdict(ForecastResponseDTO.from_forecast(forecast))


@router.get("/forecast/summary")
def get_forecast_summary(as_of_date: Optional[str] = Query(None), user_id: str = Query(DEFAULT_USER)):
    as_of = _parse_as_of(as_of_date)

    try:
        forecast, currency = calculate_forecast_with_currency(
            user_id=user_id, as_of=as_of, default_currency=DEFAULT_CURRENCY
        )
    except InvalidSettings as e:
        return _settings_error(e)

    return asdict(ForecastSummaryDTO.from_forecast(forecast, currency))


@router.get("/pay-periods")
def get_pay_periods(periods: int = Query(3, ge=1, le=26), user_id: str = Query(DEFAULT_USER)):
    try:
        schedule = upcoming_pay_periods(user_id=user_id, periods=periods)
    except InvalidSettings as e:
        return _settings_error(e)

    return [
        {"start": p.start.isoformat(), "end": p.end.isoformat()}
        for p in schedule
    ]
