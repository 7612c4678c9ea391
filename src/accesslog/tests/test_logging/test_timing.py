import re

import pytest

from accesslog.core.logging.timing import (
    format_custom,
    format_duration,
    format_rfc3339,
    format_rfc3339_nano,
    parse_duration,
)

NOW_NS = 1_700_000_000_123_456_789


@pytest.mark.parametrize(
    "ns, expected",
    [
        (0, "0s"),
        (850, "850ns"),
        (12_500, "12.5µs"),
        (1_000, "1µs"),
        (52_300_000, "52.3ms"),
        (999_999_999, "999.999999ms"),
        (1_500_000_000, "1.5s"),
        (123_500_000_000, "2m3.5s"),
        (3_600_000_000_000, "1h0m0s"),
        (-1_500, "-1.5µs"),
    ],
)
def test_format_duration(ns, expected):
    assert format_duration(ns) == expected


def test_parse_duration_inverts_format_duration(fake):
    for _ in range(50):
        ns = fake.random_int(min=0, max=10**13)
        assert parse_duration(format_duration(ns)) == ns


def test_parse_duration_rejects_garbage():
    with pytest.raises(ValueError):
        parse_duration("12")
    with pytest.raises(ValueError):
        parse_duration("3x")


def test_rfc3339_shapes():
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d(Z|[+-]\d\d:\d\d)", format_rfc3339(NOW_NS))
    assert re.fullmatch(
        r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.123456789(Z|[+-]\d\d:\d\d)", format_rfc3339_nano(NOW_NS)
    )


def test_rfc3339_nano_trims_trailing_zeros():
    value = format_rfc3339_nano(1_700_000_000_500_000_000)
    assert re.search(r":\d\d\.5(Z|[+-])", value)
    whole = format_rfc3339_nano(1_700_000_000_000_000_000)
    assert "." not in whole


def test_custom_layout_uses_microseconds():
    assert format_custom(NOW_NS, "%f") == "123456"
    assert format_custom(NOW_NS, "%Y")[:2] == "20"
