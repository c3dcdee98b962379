"""Billing API endpoints: units, readings, bill calculation, statements and backups."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict

from autofee.services import BillingContext
from autofee.services.allocation_service import UsageDetails
from autofee.services.bills_service import derive_management_cost
from autofee.services.errors import ValidationError
from autofee.services.parsers import parse_period, parse_year_month
from autofee.services.sample_data import get_sample_bill_data, insert_sample_data
from autofee.services.statement_service import (
    UnitStatement,
    render_period_text,
    render_summary_text,
    render_text,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["billing"])


def get_context(request: Request) -> BillingContext:
    """Store handle and services attached to the running application."""
    return request.app.state.context


# Request schemas
class UnitCreateRequest(BaseModel):
    id: str
    name: str
    area: float | str


class UnitUpdateRequest(BaseModel):
    name: str
    area: float | str


class ReadingInput(BaseModel):
    unit_id: str
    electricity_reading: float | str
    water_reading: float | str


class ReadingsSaveRequest(BaseModel):
    readings: list[ReadingInput]


class CalculateRequest(BaseModel):
    """Building totals for a period.

    Either total_management_cost is given directly, or total_fee is given and
    the management cost is what remains after electricity and water.
    """

    total_electricity_cost: float | str
    total_water_cost: float | str
    total_management_cost: float | str | None = None
    total_fee: float | str | None = None


# Response schemas
class UnitResponse(BaseModel):
    id: str
    name: str
    area: float
    area_ratio: float  # Percent of total area

    model_config = ConfigDict(from_attributes=True)


class UnitsResponse(BaseModel):
    units: list[UnitResponse]
    total_area: float
    total_count: int


class ReadingResponse(BaseModel):
    unit_id: str
    year: int
    month: int
    electricity_reading: float
    water_reading: float

    model_config = ConfigDict(from_attributes=True)


class ReadingsResponse(BaseModel):
    year: int
    month: int
    readings: list[ReadingResponse]


class SaveResult(BaseModel):
    saved: int


class MonthlyBillResponse(BaseModel):
    year: int
    month: int
    total_electricity_cost: float
    total_water_cost: float
    total_management_cost: float

    model_config = ConfigDict(from_attributes=True)


class UnitBillResponse(BaseModel):
    unit_id: str
    year: int
    month: int
    electricity_cost: int
    water_cost: int
    management_cost: int
    total_cost: int

    model_config = ConfigDict(from_attributes=True)


class BillsResponse(BaseModel):
    year: int
    month: int
    monthly_bill: MonthlyBillResponse | None
    bills: list[UnitBillResponse]


class UsageResponse(BaseModel):
    current_electricity: float
    previous_electricity: float
    electricity_usage: float
    current_water: float
    previous_water: float
    water_usage: float


class StatementResponse(BaseModel):
    unit_id: str
    unit_name: str
    area: float
    bill: UnitBillResponse
    usage: UsageResponse | None


class StatementsResponse(BaseModel):
    year: int
    month: int
    monthly_bill: MonthlyBillResponse | None
    statements: list[StatementResponse]
    electricity_total: int
    water_total: int
    management_total: int
    grand_total: int


class SummaryRowResponse(BaseModel):
    year: int
    month: int
    totals_by_unit: dict[str, int]
    electricity_usage: float
    water_usage: float
    total: int


class SummaryResponse(BaseModel):
    start: str
    end: str
    unit_ids: list[str]
    rows: list[SummaryRowResponse]
    totals_by_unit: dict[str, int]
    electricity_usage: float
    water_usage: float
    grand_total: int


class StatusResponse(BaseModel):
    status: str
    detail: str | None = None


def _usage_response(usage: UsageDetails | None) -> UsageResponse | None:
    if usage is None:
        return None
    return UsageResponse(
        current_electricity=usage.current_electricity,
        previous_electricity=usage.previous_electricity,
        electricity_usage=usage.electricity_usage,
        current_water=usage.current_water,
        previous_water=usage.previous_water,
        water_usage=usage.water_usage,
    )


def _statement_response(statement: UnitStatement) -> StatementResponse:
    return StatementResponse(
        unit_id=statement.unit_id,
        unit_name=statement.unit_name,
        area=statement.area,
        bill=UnitBillResponse.model_validate(statement.bill),
        usage=_usage_response(statement.usage),
    )


def _bills_response(ctx: BillingContext, year: int, month: int) -> BillsResponse:
    monthly_bill = ctx.bills.get_monthly_bill(year, month)
    return BillsResponse(
        year=year,
        month=month,
        monthly_bill=MonthlyBillResponse.model_validate(monthly_bill) if monthly_bill else None,
        bills=[UnitBillResponse.model_validate(b) for b in ctx.bills.get_unit_bills(year, month)],
    )


# Units
@router.get("/units", response_model=UnitsResponse)
def list_units(ctx: BillingContext = Depends(get_context)) -> UnitsResponse:
    units = ctx.units.list_units()
    total_area = sum(unit.area for unit in units)
    return UnitsResponse(
        units=[
            UnitResponse(
                id=unit.id,
                name=unit.name,
                area=unit.area,
                area_ratio=ctx.units.area_ratio(unit, total_area),
            )
            for unit in units
        ],
        total_area=total_area,
        total_count=len(units),
    )


@router.post("/units", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
def create_unit(body: UnitCreateRequest, ctx: BillingContext = Depends(get_context)) -> UnitResponse:
    unit = ctx.units.add_unit(body.id, body.name, body.area)
    return UnitResponse(
        id=unit.id, name=unit.name, area=unit.area, area_ratio=ctx.units.area_ratio(unit)
    )


@router.put("/units/{unit_id}", response_model=UnitResponse)
def update_unit(
    unit_id: str, body: UnitUpdateRequest, ctx: BillingContext = Depends(get_context)
) -> UnitResponse:
    unit = ctx.units.update_unit(unit_id, body.name, body.area)
    return UnitResponse(
        id=unit.id, name=unit.name, area=unit.area, area_ratio=ctx.units.area_ratio(unit)
    )


@router.delete("/units/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(unit_id: str, ctx: BillingContext = Depends(get_context)) -> Response:
    ctx.units.delete_unit(unit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Readings
@router.get("/readings/{year}/{month}", response_model=ReadingsResponse)
def get_readings(year: int, month: int, ctx: BillingContext = Depends(get_context)) -> ReadingsResponse:
    year, month = parse_period(year, month)
    readings = ctx.readings.get_readings(year, month)
    return ReadingsResponse(
        year=year,
        month=month,
        readings=[ReadingResponse.model_validate(r) for r in readings],
    )


@router.put("/readings/{year}/{month}", response_model=SaveResult)
def save_readings(
    year: int,
    month: int,
    body: ReadingsSaveRequest,
    ctx: BillingContext = Depends(get_context),
) -> SaveResult:
    readings = {r.unit_id: (r.electricity_reading, r.water_reading) for r in body.readings}
    if not readings:
        raise ValidationError("No readings given")
    return SaveResult(saved=ctx.readings.save_readings(year, month, readings))


# Bills
@router.post("/bills/{year}/{month}/calculate", response_model=BillsResponse)
def calculate_bills(
    year: int,
    month: int,
    body: CalculateRequest,
    ctx: BillingContext = Depends(get_context),
) -> BillsResponse:
    management = body.total_management_cost
    if management is None:
        if body.total_fee is None:
            raise ValidationError("total_management_cost or total_fee is required")
        management = derive_management_cost(
            body.total_fee, body.total_electricity_cost, body.total_water_cost
        )

    ctx.bills.calculate_and_save_bills(
        year, month, body.total_electricity_cost, body.total_water_cost, management
    )
    return _bills_response(ctx, year, month)


@router.get("/bills/{year}/{month}", response_model=BillsResponse)
def get_bills(year: int, month: int, ctx: BillingContext = Depends(get_context)) -> BillsResponse:
    year, month = parse_period(year, month)
    return _bills_response(ctx, year, month)


# Statements
@router.get("/statements/{year}/{month}", response_model=StatementsResponse)
def get_statements(
    year: int,
    month: int,
    unit_id: str | None = None,
    ctx: BillingContext = Depends(get_context),
) -> StatementsResponse:
    year, month = parse_period(year, month)
    period = ctx.statements.build_period_statements(year, month)
    statements = period.statements
    if unit_id is not None:
        statements = [ctx.statements.build_statement(unit_id, year, month)]

    # Totals cover the statements returned: one unit's figures when filtered
    bills = [s.bill for s in statements]
    return StatementsResponse(
        year=year,
        month=month,
        monthly_bill=(
            MonthlyBillResponse.model_validate(period.monthly_bill) if period.monthly_bill else None
        ),
        statements=[_statement_response(s) for s in statements],
        electricity_total=sum(b.electricity_cost for b in bills),
        water_total=sum(b.water_cost for b in bills),
        management_total=sum(b.management_cost for b in bills),
        grand_total=sum(b.total_cost for b in bills),
    )


@router.get("/statements/{year}/{month}/text", response_class=PlainTextResponse)
def get_statements_text(
    year: int,
    month: int,
    unit_id: str | None = None,
    ctx: BillingContext = Depends(get_context),
) -> str:
    year, month = parse_period(year, month)
    if unit_id is not None:
        return render_text(ctx.statements.build_statement(unit_id, year, month))
    return render_period_text(ctx.statements.build_period_statements(year, month))


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    start: str = Query(..., description="First month, YYYY-MM"),
    end: str = Query(..., description="Last month, YYYY-MM"),
    unit_id: str | None = None,
    output: str = Query("json", alias="format", pattern="^(json|text)$"),
    ctx: BillingContext = Depends(get_context),
):
    summary = ctx.statements.build_range_summary(
        parse_year_month(start), parse_year_month(end), unit_id
    )
    if output == "text":
        return PlainTextResponse(render_summary_text(summary))

    return SummaryResponse(
        start=start,
        end=end,
        unit_ids=summary.unit_ids,
        rows=[
            SummaryRowResponse(
                year=row.year,
                month=row.month,
                totals_by_unit=row.totals_by_unit,
                electricity_usage=row.electricity_usage,
                water_usage=row.water_usage,
                total=row.total,
            )
            for row in summary.rows
        ],
        totals_by_unit=summary.totals_by_unit,
        electricity_usage=summary.electricity_usage,
        water_usage=summary.water_usage,
        grand_total=summary.grand_total,
    )


# Data management
@router.post("/sample-data")
def load_sample_data(ctx: BillingContext = Depends(get_context)) -> dict:
    saved = insert_sample_data(ctx.store)
    return {"readings_saved": saved, **get_sample_bill_data()}


@router.get("/backup")
def export_backup(ctx: BillingContext = Depends(get_context)) -> Response:
    filename = f"autofee_backup_{date.today().isoformat()}.db"
    return Response(
        content=ctx.store.export(),
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/backup", response_model=StatusResponse)
async def import_backup(request: Request, ctx: BillingContext = Depends(get_context)) -> StatusResponse:
    data = await request.body()
    # Off the event loop: restore waits for the store lock
    await run_in_threadpool(ctx.store.restore, data)
    logger.info(f"Imported backup via API ({len(data)} bytes)")
    return StatusResponse(status="imported")


@router.delete("/data", response_model=StatusResponse)
def clear_data(ctx: BillingContext = Depends(get_context)) -> StatusResponse:
    ctx.store.reset()
    return StatusResponse(status="cleared", detail="All billing data removed")
