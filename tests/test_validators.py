from datetime import date

import pytest

from src.pension_system.pension_system.common.validators import FieldValidator, is_mobile_phone, is_valid_email
from src.pension_system.pension_system.core.enums import ComplaintPriority
from src.pension_system.pension_system.core.exceptions import ValidationError


@pytest.mark.parametrize("value", ["a@b.com", "first.last@gov.bd", "x-y@mail.example.org"])
def test_valid_emails(value):
    assert is_valid_email(value)


@pytest.mark.parametrize("value", ["", "plain", "a@b", "a@b.toolongtld"])
def test_invalid_emails(value):
    assert not is_valid_email(value)


def test_mobile_phone_allows_separators():
    assert is_mobile_phone("+880 1711-111111")
    assert not is_mobile_phone("12345")


def test_field_validator_collects_errors():
    v = FieldValidator({"name": "A", "joiningDate": "2001-13-40", "salary": "-5"})

    assert v.text("name", "bad name", min_len=2) is None
    assert v.iso_date("joiningDate", "bad date") is None
    assert v.number("salary", "bad salary", min_value=0) is None
    assert v.choice("priority", ComplaintPriority, "bad", default=ComplaintPriority.MEDIUM) == ComplaintPriority.MEDIUM

    with pytest.raises(ValidationError) as exc:
        v.raise_if_errors()
    assert [e["field"] for e in exc.value.errors] == ["name", "joiningDate", "salary"]


def test_field_validator_cleans_values():
    v = FieldValidator({"email": " Rahim@Example.COM ", "joiningDate": "2001-02-03T00:00:00.000Z", "flag": "true"})

    assert v.email("email", "bad") == "rahim@example.com"
    assert v.iso_date("joiningDate", "bad") == date(2001, 2, 3)
    assert v.boolean("flag") is True
    assert v.errors == []


@pytest.mark.parametrize("value", ["NaN", "Infinity", "-inf", float("nan"), float("inf")])
def test_number_rejects_non_finite(value):
    v = FieldValidator({"serviceYears": value})

    assert v.number("serviceYears", "bad years", min_value=0) is None
    assert [e["field"] for e in v.errors] == ["serviceYears"]


def test_integer_rejects_fractions():
    v = FieldValidator({"rating": 4.5, "level": "2", "whole": 3.0})

    assert v.integer("rating", "bad rating", min_value=1, max_value=5) is None
    assert v.integer("level", "bad level", min_value=1) == 2
    assert v.integer("whole", "bad whole") == 3
    assert [e["field"] for e in v.errors] == ["rating"]
