import pytest

from utils.fellowship_number import next_fellowship_number, FIRST_FELLOWSHIP_NUMBER


@pytest.mark.parametrize("last, expected", [
    (None, "AAA001"),
    ("AAA001", "AAA002"),
    ("AAA099", "AAA100"),
    ("AAA999", "AAB001"),
    ("AAZ999", "ABA001"),
    ("AZZ999", "BAA001"),
])
def test_next_fellowship_number(last, expected):
    assert next_fellowship_number(last) == expected


def test_unparseable_value_restarts_sequence():
    assert next_fellowship_number("bogus") == FIRST_FELLOWSHIP_NUMBER
