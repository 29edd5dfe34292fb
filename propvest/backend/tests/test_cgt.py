# tests/test_cgt.py
from dataclasses import replace
from datetime import date

import pytest

from app.domain.policies import InvalidArgument
from app.domain.tax import CgtInput, MainResidence, calculate_cgt


@pytest.fixture
def let_property() -> CgtInput:
    """£80k gain on a buy-to-let, seller earning £30k."""
    return CgtInput(
        purchase_price=200000,
        sale_price=300000,
        sale_date=date(2025, 6, 15),
        purchase_costs=5000,
        sale_costs=5000,
        improvement_costs=10000,
        annual_income=30000,
    )


def test_let_property_split_across_rate_bands(let_property):
    r = calculate_cgt(let_property)

    assert r.gross_gain == 80000
    assert r.private_residence_relief == 0
    assert r.chargeable_gain == 80000
    assert r.annual_allowance == 3000
    assert r.taxable_gain == 77000
    assert r.breakdown.basic_rate_portion == 20270
    assert r.breakdown.higher_rate_portion == 56730
    assert r.breakdown.basic_rate_tax == 3649  # 3,648.60
    assert r.breakdown.higher_rate_tax == 13615
    assert r.cgt_due == 17264  # 17,263.80
    assert r.your_share == 17264
    assert r.effective_rate == pytest.approx(17264 / 80000 * 100)


def test_deadlines(let_property):
    r = calculate_cgt(let_property)
    assert r.reporting_deadline == date(2025, 8, 14)
    assert r.payment_deadline == date(2027, 1, 31)


@pytest.mark.parametrize(
    "sold,deadline",
    [
        (date(2025, 3, 1), date(2026, 1, 31)),
        (date(2025, 4, 5), date(2026, 1, 31)),
        (date(2025, 4, 6), date(2027, 1, 31)),
    ],
)
def test_payment_deadline_follows_tax_year(let_property, sold, deadline):
    assert calculate_cgt(replace(let_property, sale_date=sold)).payment_deadline == deadline


def test_main_home_throughout_is_exempt(let_property):
    r = calculate_cgt(replace(let_property, was_main_residence=MainResidence.entire))
    assert r.private_residence_relief == 80000
    assert r.cgt_due == 0


def test_partial_residence_relief(let_property):
    # 27 months lived in + final 9 months, out of 10 years
    r = calculate_cgt(
        replace(let_property, was_main_residence="partial", months_lived_in=27, total_ownership_months=120)
    )
    assert r.private_residence_relief == 24000
    assert r.chargeable_gain == 56000


def test_partial_relief_capped_at_whole_gain(let_property):
    r = calculate_cgt(
        replace(let_property, was_main_residence=MainResidence.partial, months_lived_in=20, total_ownership_months=24)
    )
    assert r.private_residence_relief == 80000
    assert r.cgt_due == 0


def test_allowance_already_used(let_property):
    r = calculate_cgt(replace(let_property, allowance_used=5000))
    assert r.annual_allowance == 0
    assert r.taxable_gain == 80000


def test_higher_rate_taxpayer_pays_24_percent(let_property):
    r = calculate_cgt(replace(let_property, annual_income=60000))
    assert r.breakdown.basic_rate_portion == 0
    assert r.cgt_due == round(77000 * 0.24)


def test_joint_owner_share_rounds_half_up(let_property):
    # cgt_due 17,263 at a 50% split leaves 8,631.50
    r = calculate_cgt(replace(let_property, ownership_split=50, sale_price=299995.83))
    assert r.cgt_due == 17263
    assert r.your_share == 8632


def test_loss_has_no_tax(let_property):
    r = calculate_cgt(replace(let_property, sale_price=190000))
    assert r.gross_gain < 0
    assert r.chargeable_gain == 0
    assert r.cgt_due == 0
    assert r.effective_rate == 0


@pytest.mark.parametrize(
    "changes",
    [
        {"sale_price": -1},
        {"ownership_split": 120},
        {"was_main_residence": "sometimes"},
        {"was_main_residence": "partial", "months_lived_in": 12, "total_ownership_months": 0},
    ],
)
def test_bad_inputs_rejected(let_property, changes):
    with pytest.raises(InvalidArgument):
        calculate_cgt(replace(let_property, **changes))
