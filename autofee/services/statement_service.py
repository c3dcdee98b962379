"""Statement service: assembles billed amounts and usage into printable statements."""

from dataclasses import dataclass, field
from typing import NamedTuple

from autofee.models.monthly_bill import MonthlyBill
from autofee.models.unit_bill import UnitBill
from autofee.services.allocation_service import UsageDetails
from autofee.services.bills_service import BillsService
from autofee.services.errors import PreconditionError
from autofee.services.locale_service import format_amount, format_number
from autofee.services.period_service import format_period
from autofee.services.unit_service import UnitService

RULE = "-" * 44


class UnitStatement(NamedTuple):
    """One unit's statement for one period."""

    unit_id: str
    unit_name: str
    area: float
    year: int
    month: int
    bill: UnitBill
    usage: UsageDetails | None


@dataclass
class PeriodStatement:
    """All unit statements of a period with column totals."""

    year: int
    month: int
    monthly_bill: MonthlyBill | None
    statements: list[UnitStatement]
    electricity_total: int = 0
    water_total: int = 0
    management_total: int = 0
    grand_total: int = 0


@dataclass
class SummaryRow:
    """Billed totals of one month in a range summary."""

    year: int
    month: int
    totals_by_unit: dict[str, int]
    electricity_usage: float
    water_usage: float
    total: int


@dataclass
class RangeSummary:
    """Per month, per unit totals for a range of periods."""

    start: tuple[int, int]
    end: tuple[int, int]
    unit_ids: list[str]
    rows: list[SummaryRow] = field(default_factory=list)
    totals_by_unit: dict[str, int] = field(default_factory=dict)
    electricity_usage: float = 0.0
    water_usage: float = 0.0
    grand_total: int = 0


class StatementService:
    """Builds statements from stored unit bills and readings."""

    def __init__(self, bills_service: BillsService, unit_service: UnitService):
        self.bills = bills_service
        self.units = unit_service

    def _statement_for(self, bill: UnitBill, names: dict[str, tuple[str, float]]) -> UnitStatement:
        unit_name, area = names.get(bill.unit_id, (bill.unit_id, 0.0))
        return UnitStatement(
            unit_id=bill.unit_id,
            unit_name=unit_name,
            area=area,
            year=bill.year,
            month=bill.month,
            bill=bill,
            usage=self.bills.get_usage_details(bill.unit_id, bill.year, bill.month),
        )

    def _unit_names(self) -> dict[str, tuple[str, float]]:
        return {unit.id: (unit.name, unit.area) for unit in self.units.list_units()}

    def build_statement(self, unit_id: str, year: int, month: int) -> UnitStatement:
        """Build one unit's statement.

        Raises:
            NotFoundError: If the unit does not exist
            PreconditionError: If the unit has no bill for the period
        """
        self.units.require_unit(unit_id)
        bill = self.bills.get_unit_bill(unit_id, year, month)
        if bill is None:
            raise PreconditionError(
                f"No bill for unit {unit_id} in {format_period(year, month)}; calculate it first"
            )
        return self._statement_for(bill, self._unit_names())

    def build_period_statements(self, year: int, month: int) -> PeriodStatement:
        """Build statements for every billed unit of a period.

        Raises:
            PreconditionError: If the period has not been calculated
        """
        bills = self.bills.get_unit_bills(year, month)
        if not bills:
            raise PreconditionError(
                f"No bills for {format_period(year, month)}; calculate the period first"
            )

        names = self._unit_names()
        statements = [self._statement_for(bill, names) for bill in bills]
        return PeriodStatement(
            year=year,
            month=month,
            monthly_bill=self.bills.get_monthly_bill(year, month),
            statements=statements,
            electricity_total=int(sum(s.bill.electricity_cost for s in statements)),
            water_total=int(sum(s.bill.water_cost for s in statements)),
            management_total=int(sum(s.bill.management_cost for s in statements)),
            grand_total=int(sum(s.bill.total_cost for s in statements)),
        )

    def build_range_summary(
        self,
        start: tuple[int, int],
        end: tuple[int, int],
        unit_id: str | None = None,
    ) -> RangeSummary:
        """Summarize billed totals and usage month by month.

        Args:
            start: First (year, month), inclusive
            end: Last (year, month), inclusive
            unit_id: Limit the summary to one unit

        Raises:
            NotFoundError: If unit_id is given but does not exist
            PreconditionError: If start is after end
        """
        if start > end:
            raise PreconditionError(
                f"Range start {format_period(*start)} is after end {format_period(*end)}"
            )
        if unit_id is not None:
            self.units.require_unit(unit_id)
            unit_ids = [unit_id]
        else:
            unit_ids = [unit.id for unit in self.units.list_units()]

        summary = RangeSummary(
            start=start,
            end=end,
            unit_ids=unit_ids,
            totals_by_unit={uid: 0 for uid in unit_ids},
        )

        for (year, month), bills in self.bills.get_bills_in_range(start, end, unit_id):
            totals = {bill.unit_id: int(bill.total_cost) for bill in bills}
            electricity_usage = 0.0
            water_usage = 0.0
            for bill in bills:
                usage = self.bills.get_usage_details(bill.unit_id, year, month)
                if usage is not None:
                    electricity_usage += usage.electricity_usage
                    water_usage += usage.water_usage

            row = SummaryRow(
                year=year,
                month=month,
                totals_by_unit=totals,
                electricity_usage=electricity_usage,
                water_usage=water_usage,
                total=sum(totals.values()),
            )
            summary.rows.append(row)
            for uid, amount in totals.items():
                summary.totals_by_unit[uid] = summary.totals_by_unit.get(uid, 0) + amount
            summary.electricity_usage += electricity_usage
            summary.water_usage += water_usage
            summary.grand_total += row.total

        return summary


def render_text(statement: UnitStatement) -> str:
    """Render one unit's statement as printable text."""
    bill = statement.bill
    lines = [
        f"{statement.unit_name} ({statement.unit_id})  {format_period(statement.year, statement.month)}",
        RULE,
    ]

    usage = statement.usage
    if usage is not None:
        lines += [
            f"{'':<12}{'Previous':>10}{'Current':>11}{'Usage':>11}",
            f"{'Electricity':<12}{format_number(usage.previous_electricity):>10}"
            f"{format_number(usage.current_electricity):>11}"
            f"{format_number(usage.electricity_usage):>11} kWh",
            f"{'Water':<12}{format_number(usage.previous_water):>10}"
            f"{format_number(usage.current_water):>11}"
            f"{format_number(usage.water_usage):>11} m³",
            RULE,
        ]

    lines += [
        f"{'Electricity':<24}{format_amount(bill.electricity_cost):>20}",
        f"{'Water':<24}{format_amount(bill.water_cost):>20}",
        f"{'Management':<24}{format_amount(bill.management_cost):>20}",
        RULE,
        f"{'Total due':<24}{format_amount(bill.total_cost):>20}",
    ]
    return "\n".join(lines)


def render_period_text(period: PeriodStatement) -> str:
    """Render every statement of a period, followed by the period totals."""
    parts = [render_text(statement) for statement in period.statements]
    totals = [
        f"Totals {format_period(period.year, period.month)}",
        RULE,
        f"{'Electricity':<24}{format_amount(period.electricity_total):>20}",
        f"{'Water':<24}{format_amount(period.water_total):>20}",
        f"{'Management':<24}{format_amount(period.management_total):>20}",
        RULE,
        f"{'Total':<24}{format_amount(period.grand_total):>20}",
    ]
    parts.append("\n".join(totals))
    return "\n\n".join(parts)


def render_summary_text(summary: RangeSummary) -> str:
    """Render a range summary as a month-by-unit table."""
    header = f"{'Month':<9}" + "".join(f"{uid:>14}" for uid in summary.unit_ids) + f"{'Total':>14}"
    lines = [
        f"Summary {format_period(*summary.start)} .. {format_period(*summary.end)}",
        header,
        "-" * len(header),
    ]
    for row in summary.rows:
        cells = "".join(
            f"{format_amount(row.totals_by_unit.get(uid, 0), include_symbol=False):>14}"
            for uid in summary.unit_ids
        )
        lines.append(
            f"{format_period(row.year, row.month):<9}{cells}"
            f"{format_amount(row.total, include_symbol=False):>14}"
        )
    lines.append("-" * len(header))
    cells = "".join(
        f"{format_amount(summary.totals_by_unit.get(uid, 0), include_symbol=False):>14}"
        for uid in summary.unit_ids
    )
    lines.append(
        f"{'Total':<9}{cells}{format_amount(summary.grand_total, include_symbol=False):>14}"
    )
    return "\n".join(lines)


__all__ = [
    "StatementService",
    "UnitStatement",
    "PeriodStatement",
    "RangeSummary",
    "SummaryRow",
    "render_text",
    "render_period_text",
    "render_summary_text",
]
