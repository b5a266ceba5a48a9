import pytest

from deskcrm.utils.phone import digits_only, normalize_in_mobile


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("9876543210", "9876543210"),
        ("+91 98765 43210", "9876543210"),
        ("+91-98765-43210", "9876543210"),
        ("098765 43210", "9876543210"),
        (9876543210, "9876543210"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_in_mobile(raw, expected):
    assert normalize_in_mobile(raw) == expected


def test_unparseable_input_falls_back_to_digits():
    assert normalize_in_mobile("call 12") == "12"


def test_digits_only():
    assert digits_only("1234 5678-9012") == "123456789012"
    assert digits_only(None) == ""
