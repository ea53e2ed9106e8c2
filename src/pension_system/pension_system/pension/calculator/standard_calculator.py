from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from .base import PensionCalculator
from ...applications.model import PensionDetails

BASE_PERCENTAGE = Decimal(50)
MAX_PERCENTAGE = Decimal(80)
BASE_SERVICE_YEARS = Decimal(20)
GRATUITY_YEAR_CAP = Decimal(30)
PROVIDENT_FUND_RATE = Decimal("0.12")


def _round(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class StandardPensionCalculator(PensionCalculator):
    """Standard rule.

    - pension percentage: 50% plus 1% per service year beyond 20, capped at 80%
    - gratuity: one month's salary per service year, at most 30 years
    - provident fund: 12% of the yearly salary for every service year
    """

    def percentage(self, service_years: float) -> Decimal:
        years = Decimal(str(service_years))
        extra = max(Decimal(0), years - BASE_SERVICE_YEARS)
        return min(BASE_PERCENTAGE + extra, MAX_PERCENTAGE)

    def calculate(self, *, last_basic_salary: float, service_years: float, at: datetime) -> PensionDetails:
        salary = Decimal(str(last_basic_salary))
        years = Decimal(str(service_years))

        return PensionDetails(
            monthly_pension=_round(salary * self.percentage(service_years) / 100),
            gratuity=_round(salary * min(years, GRATUITY_YEAR_CAP)),
            provident_fund=_round(salary * 12 * years * PROVIDENT_FUND_RATE),
            calculated_at=at,
        )
