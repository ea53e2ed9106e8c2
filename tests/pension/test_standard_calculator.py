from datetime import date, datetime

import pytest

from src.pension_system.pension_system.common.datetime_utils import calculate_service_years
from src.pension_system.pension_system.pension.calculator.standard_calculator import StandardPensionCalculator

AT = datetime(2026, 1, 1, 10, 0)


def test_standard_calculator_25_years():
    details = StandardPensionCalculator().calculate(last_basic_salary=50000, service_years=25, at=AT)

    assert details.monthly_pension == 27500
    assert details.gratuity == 1250000
    assert details.provident_fund == 1800000
    assert details.calculated_at == AT


@pytest.mark.parametrize(
    "years, expected",
    [(19, 50), (20, 50), (21, 51), (25.5, 55.5), (45, 75), (50, 80), (60, 80)],
)
def test_percentage_grows_after_20_years_and_caps_at_80(years, expected):
    assert float(StandardPensionCalculator().percentage(years)) == expected


def test_gratuity_counts_at_most_30_years():
    details = StandardPensionCalculator().calculate(last_basic_salary=10000, service_years=35, at=AT)

    assert details.gratuity == 300000
    assert details.monthly_pension == 6500


def test_amounts_round_half_up():
    calc = StandardPensionCalculator()

    assert calc.calculate(last_basic_salary=1, service_years=20, at=AT).monthly_pension == 1
    details = calc.calculate(last_basic_salary=12345, service_years=21, at=AT)
    assert details.monthly_pension == 6296
    assert details.provident_fund == 373313


def test_service_years_truncate_to_two_decimals():
    assert calculate_service_years(date(2000, 1, 1), date(2025, 1, 1)) == 25.01


def test_service_years_run_until_today_without_retirement_date():
    assert calculate_service_years(date(2006, 3, 2), today=date(2026, 3, 2)) == 20.01
