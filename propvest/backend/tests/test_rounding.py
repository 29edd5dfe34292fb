# tests/test_rounding.py
import pytest

from app.domain.rounding import round_half_up


@pytest.mark.parametrize(
    "value,expected",
    [(0.5, 1), (1.5, 2), (2.5, 3), (2.4999, 2), (-2.5, -2), (-2.6, -3), (0, 0)],
)
def test_ties_round_up(value, expected):
    assert round_half_up(value) == expected


def test_pence():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(10.0, 2) == 10.0


def test_returns_float():
    assert isinstance(round_half_up(7), float)
