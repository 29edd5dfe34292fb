# tests/test_flip.py
from dataclasses import replace

import pytest

from app.domain.calculators import compute_flip
from app.domain.policies import InvalidArgument


def test_default_flip(flip_inputs):
    r = compute_flip(flip_inputs)

    assert r.total_costs == 220000
    assert r.bridging_amount == pytest.approx(126000)
    assert r.cash_required == pytest.approx(94000)
    assert r.bridging_interest == pytest.approx(126000 * 0.0075 * 4)
    assert r.bridging_fee_amount == pytest.approx(2520)
    assert r.stamp_duty == 5400
    assert r.agent_fee == pytest.approx(4200)
    assert r.total_project_costs == pytest.approx(238900)
    assert r.gross_profit == pytest.approx(41100)
    assert r.profit_margin == pytest.approx(41100 / 280000 * 100)
    assert r.roi_on_cash == pytest.approx(41100 / 94000 * 100)
    assert r.monthly_roi == pytest.approx(r.roi_on_cash / 4)


def test_loss_making_flip(flip_inputs):
    r = compute_flip(replace(flip_inputs, target_sale_price=200000))
    assert r.gross_profit < 0
    assert r.roi_on_cash < 0


@pytest.mark.parametrize(
    "changes",
    [
        {"refurb_timeline": 0},
        {"target_sale_price": 0},
        {"purchase_price": 0},
        {"estate_agent_fee": -1},
    ],
)
def test_bad_inputs_rejected(flip_inputs, changes):
    with pytest.raises(InvalidArgument):
        compute_flip(replace(flip_inputs, **changes))


def test_pure(flip_inputs):
    assert compute_flip(flip_inputs) == compute_flip(flip_inputs)
