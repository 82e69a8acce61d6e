import pytest

from fikaconnect.services.outputs.formatter import format_currency, generate_id
from fikaconnect.services.validation import (
    format_phone_number,
    validate_email,
    validate_package_weight,
    validate_phone,
)


@pytest.mark.parametrize("phone", ["0772123456", "+256 772 123 456", "772123456", "0201234567"])
def test_valid_uganda_phones(phone):
    assert validate_phone(phone)


@pytest.mark.parametrize("phone", ["", "12345", "0612123456", "+254712345678"])
def test_invalid_uganda_phones(phone):
    assert not validate_phone(phone)


def test_format_phone_number():
    assert format_phone_number("0772 123456") == "+256772123456"
    assert format_phone_number("256772123456") == "+256772123456"
    assert format_phone_number("772123456") == "+256772123456"
    assert format_phone_number("12") == "12"


def test_validate_email():
    assert validate_email("sender@fika.ug")
    assert not validate_email("sender@fika")
    assert not validate_email("")


def test_validate_package_weight():
    assert validate_package_weight(0.5)
    assert validate_package_weight(1000)
    assert not validate_package_weight(0)
    assert not validate_package_weight(1000.1)


def test_format_currency_has_no_minor_units():
    assert format_currency(30000) == "UGX 30,000"
    assert format_currency(7000, "KES") == "KES 7,000"


def test_generate_id_shape():
    identifier = generate_id("grp")

    prefix, timestamp, suffix = identifier.split("-")
    assert prefix == "GRP"
    assert timestamp.isalnum() and timestamp == timestamp.upper()
    assert len(suffix) == 9
