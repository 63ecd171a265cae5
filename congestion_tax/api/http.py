import logging
from datetime import datetime

from fastapi import APIRouter, FastAPI, Query, Request

from congestion_tax import __version__
from congestion_tax.api.errors import register_exception_handlers
from congestion_tax.config import get_settings
from congestion_tax.core.models import TaxCalculationRequest, TaxCalculationResponse
from congestion_tax.core.validate.request import (
    parse_passage_times,
    raise_for_issues,
    validate_calculation_request,
)
from congestion_tax.lifespan import build_application_lifespan
from congestion_tax.tax.rules import get_tax_rules
from congestion_tax.tax.service import CongestionTaxService

API_PREFIX = "/api/v1/congestion-tax"
logger = logging.getLogger("congestion_tax")


async def _announce_rules(app: FastAPI) -> None:
    rules = app.state.tax_rules
    logger.info(
        "Congestion tax API ready; currency=%s calendar_years=%s toll_free_months=%s",
        rules.currency,
        list(rules.calendar.covered_years),
        sorted(rules.calendar.toll_free_months),
    )


app = FastAPI(
    title="Congestion Tax Calculator",
    description=(
        "Calculates Gothenburg congestion tax for vehicle passages. Passages are grouped by day, "
        "merged under the 60-minute single-charge rule and capped at the daily maximum."
    ),
    version=__version__,
    lifespan=build_application_lifespan("api", startup_hook=_announce_rules),
)
register_exception_handlers(app)
router = APIRouter(prefix=API_PREFIX, tags=["congestion-tax"])


def _tax_service(request: Request) -> CongestionTaxService:
    service = getattr(request.app.state, "tax_service", None)
    if service is None:
        service = CongestionTaxService(get_tax_rules())
    return service


def _calculate(request: Request, vehicle_type: str, passage_times: list[datetime]) -> TaxCalculationResponse:
    service = _tax_service(request)
    settings = getattr(request.app.state, "settings", get_settings())
    issues = validate_calculation_request(vehicle_type, passage_times, rules=service.rules, settings=settings)
    raise_for_issues(issues)
    result = service.calculate_tax(vehicle_type, passage_times)
    return TaxCalculationResponse.from_result(result)


@app.get("/health")
def health(request: Request):
    settings = getattr(request.app.state, "settings", get_settings())
    rules = _tax_service(request).rules
    return {
        "status": "ok",
        "build": {
            "version": settings.build_version,
            "sha": settings.build_sha,
        },
        "rules": {
            "currency": rules.currency,
            "max_daily_tax": rules.max_daily_tax,
            "single_charge_interval_minutes": rules.single_charge_interval_minutes,
            "calendar_years": list(rules.calendar.covered_years),
        },
    }


@router.post("/calculate", response_model=TaxCalculationResponse)
def calculate_tax(payload: TaxCalculationRequest, request: Request):
    logger.info("Received tax calculation request for vehicle: %s", payload.vehicle_type)
    response = _calculate(request, payload.vehicle_type, payload.passage_times)
    logger.info(
        "Tax calculation completed for vehicle: %s, total: %s", payload.vehicle_type, response.total_tax
    )
    return response


@router.get("/calculate", response_model=TaxCalculationResponse)
def calculate_tax_simple(
    request: Request,
    vehicle_type: str = Query(..., alias="vehicleType", examples=["Car"]),
    passage_times: str = Query(
        ...,
        alias="passageTimes",
        description="Comma-separated passage times, e.g. 2013-02-07T06:23:27,2013-02-08T15:29:00",
    ),
):
    logger.info("Received simple tax calculation request for vehicle: %s", vehicle_type)
    response = _calculate(request, vehicle_type, parse_passage_times(passage_times))
    logger.info("Simple tax calculation completed for vehicle: %s, total: %s", vehicle_type, response.total_tax)
    return response


@router.get("/vehicle-types")
def vehicle_types(request: Request) -> list[str]:
    return _tax_service(request).supported_vehicle_types()


@router.get("/toll-schedule")
def toll_schedule(request: Request):
    return _tax_service(request).toll_schedule()


app.include_router(router)
