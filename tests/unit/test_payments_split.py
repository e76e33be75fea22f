import pytest
from decimal import Decimal

from marketplace.errors import ValidationError
from marketplace.payments.split import compute_split, parse_amount, to_minor_units

def test_split_19_99_at_ten_percent():
    amounts = compute_split(Decimal("19.99"), Decimal("0.10"))
    assert amounts.amount_minor == 1999
    assert amounts.platform_fee_minor == 200
    assert amounts.vendor_share_minor == 1799

@pytest.mark.parametrize("raw", ["0.01", "0.05", "1", "9.95", "19.99", "50.00", "123.45", "999999.99", "0.015"])
@pytest.mark.parametrize("rate", ["0", "0.10", "0.125", "0.333", "0.99"])
def test_fee_and_share_always_sum_to_amount(raw, rate):
    amounts = compute_split(Decimal(raw), Decimal(rate))
    assert amounts.platform_fee_minor + amounts.vendor_share_minor == amounts.amount_minor
    assert amounts.platform_fee_minor >= 0
    assert amounts.vendor_share_minor >= 0

def test_to_minor_units_rounds_half_up():
    assert to_minor_units(Decimal("0.005")) == 1
    assert to_minor_units(Decimal("10.004")) == 1000
    assert to_minor_units(Decimal("10.005")) == 1001

def test_fee_rounds_half_up():
    # 25 * 0.10 = 2.5 -> 3
    amounts = compute_split(Decimal("0.25"), Decimal("0.10"))
    assert amounts.platform_fee_minor == 3
    assert amounts.vendor_share_minor == 22

def test_parse_amount_accepts_numbers_and_strings():
    assert parse_amount("19.99") == Decimal("19.99")
    assert parse_amount(50) == Decimal("50")
    # float passé par str(): pas de dérive binaire
    assert parse_amount(19.99) == Decimal("19.99")

@pytest.mark.parametrize("raw,message", [
    (None, "Amount is required."),
    ("", "Amount is required."),
    (True, "Amount is required."),
    ("abc", "Amount must be a number."),
    ("NaN", "Amount must be a number."),
    ("Infinity", "Amount must be a number."),
    (0, "Amount must be greater than 0."),
    ("-5", "Amount must be greater than 0."),
    ("1e30", "Amount must not exceed 999999.99."),
    ("1000000", "Amount must not exceed 999999.99."),
])
def test_parse_amount_rejects_invalid(raw, message):
    with pytest.raises(ValidationError) as exc:
        parse_amount(raw)
    assert exc.value.message == message
    assert exc.value.kind == "validation"

def test_compute_split_rejects_sub_minor_amount():
    with pytest.raises(ValidationError):
        compute_split(Decimal("0.001"), Decimal("0.10"))

def test_to_minor_units_out_of_context_range_is_validation_error():
    # quantize au-delà de la précision du contexte Decimal (28 chiffres)
    with pytest.raises(ValidationError) as exc:
        to_minor_units(Decimal("1e30"))
    assert exc.value.kind == "validation"

def test_compute_split_huge_amount_is_validation_error():
    with pytest.raises(ValidationError):
        compute_split(Decimal("1e30"), Decimal("0.10"))
