# tests/test_sdlt_regional.py
import pytest

from app.domain.policies import InvalidArgument
from app.domain.tax import Location, SdltInput, calculate_sdlt, compute_transfer_tax


def test_england_standard_breakdown():
    r = calculate_sdlt(SdltInput(purchase_price=300000))

    assert r.total_sdlt == pytest.approx(2500)
    assert r.effective_rate == pytest.approx(2500 / 300000 * 100)
    assert [b.band for b in r.breakdown] == ["£0 - £250,000", "£250,000 - £925,000"]
    assert [b.taxable_amount for b in r.breakdown] == [250000, 50000]
    assert sum(b.tax for b in r.breakdown) == pytest.approx(r.total_sdlt)
    assert r.additional_property_surcharge == 0
    assert r.non_uk_resident_surcharge == 0


def test_top_band_label_is_open_ended():
    r = calculate_sdlt(SdltInput(purchase_price=2000000))
    assert r.breakdown[-1].band == "£1,500,000 - and above"
    assert r.breakdown[-1].rate == 12


@pytest.mark.parametrize("price,expected", [(400000, 0), (425000, 0), (500000, 3750), (625000, 10000)])
def test_first_time_buyer_relief(price, expected):
    r = calculate_sdlt(SdltInput(purchase_price=price, is_first_time_buyer=True))
    assert r.total_sdlt == pytest.approx(expected)
    assert "first-time buyer" in r.explanation


def test_first_time_buyer_relief_lost_above_cap():
    r = calculate_sdlt(SdltInput(purchase_price=700000, is_first_time_buyer=True))
    assert r.total_sdlt == pytest.approx(22500)


def test_first_time_buyer_relief_not_for_additional_property():
    r = calculate_sdlt(SdltInput(purchase_price=300000, is_first_time_buyer=True, is_additional_property=True))
    assert r.total_sdlt == pytest.approx(11500)


def test_england_additional_matches_simple_calculator():
    r = calculate_sdlt(SdltInput(purchase_price=300000, is_additional_property=True))
    assert r.total_sdlt == pytest.approx(11500)
    assert r.total_sdlt == compute_transfer_tax(300000, True)
    assert r.additional_property_surcharge == pytest.approx(9000)


def test_non_uk_resident_surcharge():
    r = calculate_sdlt(SdltInput(purchase_price=300000, is_non_uk_resident=True))
    assert r.standard_sdlt == pytest.approx(2500)
    assert r.non_uk_resident_surcharge == pytest.approx(6000)
    assert r.total_sdlt == pytest.approx(8500)
    assert "non-UK residents" in r.explanation


def test_company_flat_rate():
    r = calculate_sdlt(
        SdltInput(purchase_price=600000, is_company_purchase=True, is_high_value_company_purchase=True)
    )
    assert r.total_sdlt == pytest.approx(90000)
    assert r.effective_rate == 15
    assert len(r.breakdown) == 1


def test_company_flat_rate_needs_price_over_threshold():
    r = calculate_sdlt(
        SdltInput(purchase_price=400000, is_company_purchase=True, is_high_value_company_purchase=True)
    )
    assert r.total_sdlt == pytest.approx(7500)


def test_scotland_lbtt():
    assert calculate_sdlt(SdltInput(purchase_price=300000, location=Location.scotland)).total_sdlt == pytest.approx(4600)

    ads = calculate_sdlt(SdltInput(purchase_price=300000, location=Location.scotland, is_additional_property=True))
    assert ads.total_sdlt == pytest.approx(22600)
    assert ads.additional_property_surcharge == pytest.approx(18000)


def test_wales_ltt():
    assert calculate_sdlt(SdltInput(purchase_price=300000, location=Location.wales)).total_sdlt == pytest.approx(4500)

    higher = calculate_sdlt(SdltInput(purchase_price=300000, location="wales", is_additional_property=True))
    assert higher.total_sdlt == pytest.approx(16500)


def test_zero_price_has_zero_effective_rate():
    r = calculate_sdlt(SdltInput(purchase_price=0))
    assert r.total_sdlt == 0
    assert r.effective_rate == 0
    assert r.breakdown == ()


def test_bad_inputs_rejected():
    with pytest.raises(InvalidArgument):
        calculate_sdlt(SdltInput(purchase_price=-1))
    with pytest.raises(InvalidArgument):
        calculate_sdlt(SdltInput(purchase_price=300000, location="ireland"))
