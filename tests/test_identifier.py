import pytest

from afroute.identifier import (
    STANDARD_CODE_LENGTH,
    MalformedCodeError,
    StandardCode,
    format_standard_code,
    is_well_formed,
    parse_standard_code,
)


def test_standard_code_is_eleven_digits():
    assert STANDARD_CODE_LENGTH == 11


@pytest.mark.parametrize("code", ["23401000009", "00000000000", "99999999999"])
def test_is_well_formed_accepts_eleven_ascii_digits(code):
    assert is_well_formed(code)


@pytest.mark.parametrize(
    "code",
    [
        "",
        "2340100000",       # 10 digits
        "234010000090",     # 12 digits
        "234-01-000009",
        " 23401000009",
        "23401000009\n",
        "2340100000A",
        "٢٣٤٠١٠٠٠٠٠٩",      # Arabic-Indic digits
        None,
        23401000009,
    ],
)
def test_is_well_formed_rejects_everything_else(code):
    assert not is_well_formed(code)


def test_parse_splits_country_category_sequence():
    code = parse_standard_code("23401000009")
    assert code == StandardCode(country_code="234", category="01", sequence="000009")
    assert code.sequence_number == 9
    assert str(code) == "23401000009"
    assert code.to_dict() == {
        "id": "23401000009",
        "country_code": "234",
        "category": "01",
        "sequence": "000009",
    }


def test_parse_does_not_normalize():
    with pytest.raises(MalformedCodeError):
        parse_standard_code(" 23401000009 ")


def test_malformed_code_error_is_value_error():
    with pytest.raises(ValueError):
        parse_standard_code("not-a-code")


def test_format_zero_pads_each_part():
    assert format_standard_code(234, 1, 9) == "23401000009"
    assert format_standard_code("027", "04", "12") == "02704000012"
    assert format_standard_code(27, 4, 999999) == "02704999999"


def test_format_accepts_extra_leading_zeros():
    assert format_standard_code("0234", "001", "0000009") == "23401000009"


@pytest.mark.parametrize(
    "parts",
    [
        (1000, 1, 1),
        (234, 100, 1),
        (234, 1, 1000000),
        (-1, 1, 1),
        ("23a", 1, 1),
        (234, True, 1),
        (234, 1, 1.5),
    ],
)
def test_format_rejects_parts_that_do_not_fit(parts):
    with pytest.raises(MalformedCodeError):
        format_standard_code(*parts)


def test_format_then_parse_keeps_parts():
    code = parse_standard_code(format_standard_code(254, 4, 2))
    assert (code.country_code, code.category, code.sequence_number) == ("254", "04", 2)
