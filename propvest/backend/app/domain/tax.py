# app/domain/tax.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

from .policies import InvalidArgument, require_non_negative, require_percent, require_positive
from .rounding import round_half_up

# (threshold, rate %) pairs, ascending. A band runs from its threshold to the next one.
STANDARD_BANDS: tuple[tuple[float, float], ...] = (
    (0.0, 0.0),
    (250_000.0, 5.0),
    (925_000.0, 10.0),
    (1_500_000.0, 12.0),
)

ADDITIONAL_PROPERTY_SURCHARGE_PCT = 3.0


def _banded_tax(price: float, bands: tuple[tuple[float, float], ...]) -> list[tuple[float, float, float, float]]:
    """
    Marginal band walk. Returns (band_start, rate, taxable_amount, tax) for each band
    the price reaches into.
    """
    out: list[tuple[float, float, float, float]] = []
    for i, (start, rate) in enumerate(bands):
        if price <= start:
            break
        end = bands[i + 1][0] if i + 1 < len(bands) else float("inf")
        taxable = min(price, end) - start
        out.append((start, rate, taxable, taxable * rate / 100.0))
    return out


def compute_transfer_tax(price: float, is_additional_property: bool) -> float:
    """
    England residential stamp duty: 0/5/10/12% marginal bands, plus a flat 3% of the
    whole price for additional properties. Rounded to the nearest pound.

    Negative prices are rejected rather than clamped; a negative price is always a
    caller bug.
    """
    p = require_non_negative("price", price)
    tax = sum(t for _, _, _, t in _banded_tax(p, STANDARD_BANDS))
    if is_additional_property:
        tax += p * ADDITIONAL_PROPERTY_SURCHARGE_PCT / 100.0
    return round_half_up(tax)


# ----- Regional calculator (SDLT / LBTT / LTT) -----


class Location(str, Enum):
    england = "england"
    scotland = "scotland"
    wales = "wales"


FIRST_TIME_BUYER_BANDS = ((0.0, 0.0), (425_000.0, 5.0))
FIRST_TIME_BUYER_CAP = 625_000.0

ENGLAND_ADDITIONAL_BANDS = (
    (0.0, 3.0),
    (250_000.0, 8.0),
    (925_000.0, 13.0),
    (1_500_000.0, 15.0),
)

LBTT_BANDS = (
    (0.0, 0.0),
    (145_000.0, 2.0),
    (250_000.0, 5.0),
    (325_000.0, 10.0),
    (750_000.0, 12.0),
)
LBTT_ADS_PCT = 6.0

LTT_BANDS = (
    (0.0, 0.0),
    (225_000.0, 6.0),
    (400_000.0, 7.5),
    (750_000.0, 10.0),
    (1_500_000.0, 12.0),
)
LTT_HIGHER_RATES_PCT = 4.0

NON_UK_RESIDENT_SURCHARGE_PCT = 2.0
COMPANY_FLAT_RATE_PCT = 15.0
COMPANY_FLAT_RATE_THRESHOLD = 500_000.0


@dataclass(frozen=True)
class SdltInput:
    purchase_price: float
    location: Location = Location.england
    is_first_time_buyer: bool = False
    is_additional_property: bool = False
    is_non_uk_resident: bool = False
    is_company_purchase: bool = False
    is_high_value_company_purchase: bool = False


@dataclass(frozen=True)
class SdltBand:
    band: str
    rate: float
    taxable_amount: float
    tax: float


@dataclass(frozen=True)
class SdltResult:
    total_sdlt: float
    effective_rate: float
    breakdown: tuple[SdltBand, ...]
    standard_sdlt: float
    additional_property_surcharge: float
    non_uk_resident_surcharge: float
    explanation: str


def _with_surcharge(bands: tuple[tuple[float, float], ...], pct: float) -> tuple[tuple[float, float], ...]:
    return tuple((start, rate + pct) for start, rate in bands)


def _band_label(start: float, bands: tuple[tuple[float, float], ...]) -> str:
    nxt = [s for s, _ in bands if s > start]
    upper = f"£{nxt[0]:,.0f}" if nxt else "and above"
    return f"£{start:,.0f} - {upper}"


def _breakdown(price: float, bands: tuple[tuple[float, float], ...]) -> tuple[float, tuple[SdltBand, ...]]:
    rows = _banded_tax(price, bands)
    items = tuple(
        SdltBand(band=_band_label(start, bands), rate=rate, taxable_amount=taxable, tax=tax)
        for start, rate, taxable, tax in rows
    )
    return sum(b.tax for b in items), items


def _effective_rate(total: float, price: float) -> float:
    return (total / price) * 100.0 if price > 0 else 0.0


def calculate_sdlt(inp: SdltInput) -> SdltResult:
    """
    Detailed transfer tax by nation, with a per-band breakdown for display.

    England covers first-time buyer relief, the additional-property bands, the
    non-UK resident surcharge and the flat company rate. Scotland (LBTT) and
    Wales (LTT) apply their own bands plus their additional-dwelling supplements.
    """
    price = require_non_negative("purchase_price", inp.purchase_price)
    try:
        location = Location(inp.location)
    except ValueError:
        raise InvalidArgument(f"unknown location: {inp.location}")

    if location == Location.scotland:
        return _regional(price, inp.is_additional_property, LBTT_BANDS, LBTT_ADS_PCT,
                         explanation_additional="Scotland applies the Additional Dwelling Supplement (ADS) of 6% on additional properties.",
                         explanation_standard="Scottish LBTT rates apply. You pay no tax on the first £145,000.")
    if location == Location.wales:
        return _regional(price, inp.is_additional_property, LTT_BANDS, LTT_HIGHER_RATES_PCT,
                         explanation_additional="Wales applies a 4% Higher Rates surcharge on additional properties.",
                         explanation_standard="Welsh LTT rates apply. You pay no tax on the first £225,000.")

    if inp.is_company_purchase and inp.is_high_value_company_purchase and price > COMPANY_FLAT_RATE_THRESHOLD:
        total = price * COMPANY_FLAT_RATE_PCT / 100.0
        return SdltResult(
            total_sdlt=total,
            effective_rate=COMPANY_FLAT_RATE_PCT,
            breakdown=(SdltBand(band="£0+", rate=COMPANY_FLAT_RATE_PCT, taxable_amount=price, tax=total),),
            standard_sdlt=total,
            additional_property_surcharge=0.0,
            non_uk_resident_surcharge=0.0,
            explanation="Company purchase over £500,000 is subject to the 15% flat rate.",
        )

    ftb = inp.is_first_time_buyer and price <= FIRST_TIME_BUYER_CAP and not inp.is_additional_property
    if ftb:
        bands = FIRST_TIME_BUYER_BANDS
        explanation = (
            "As a first-time buyer, you pay no SDLT on the first £425,000. "
            "You only pay 5% on the portion from £425,001 to £625,000."
        )
    elif inp.is_additional_property:
        bands = ENGLAND_ADDITIONAL_BANDS
        explanation = (
            "You're buying an additional property, so you pay a 3% surcharge on all bands. "
            "This applies to second homes and buy-to-let investments."
        )
    else:
        bands = STANDARD_BANDS
        explanation = "Standard SDLT rates apply. You pay no tax on the first £250,000 of the property value."

    standard, breakdown = _breakdown(price, bands)

    non_resident = price * NON_UK_RESIDENT_SURCHARGE_PCT / 100.0 if inp.is_non_uk_resident else 0.0
    if non_resident:
        explanation += " An additional 2% surcharge applies for non-UK residents."

    total = standard + non_resident
    return SdltResult(
        total_sdlt=total,
        effective_rate=_effective_rate(total, price),
        breakdown=breakdown,
        standard_sdlt=standard,
        additional_property_surcharge=(
            price * ADDITIONAL_PROPERTY_SURCHARGE_PCT / 100.0 if inp.is_additional_property else 0.0
        ),
        non_uk_resident_surcharge=non_resident,
        explanation=explanation,
    )


def _regional(
    price: float,
    additional: bool,
    bands: tuple[tuple[float, float], ...],
    surcharge_pct: float,
    *,
    explanation_additional: str,
    explanation_standard: str,
) -> SdltResult:
    applied = _with_surcharge(bands, surcharge_pct) if additional else bands
    standard, breakdown = _breakdown(price, applied)
    return SdltResult(
        total_sdlt=standard,
        effective_rate=_effective_rate(standard, price),
        breakdown=breakdown,
        standard_sdlt=standard,
        additional_property_surcharge=price * surcharge_pct / 100.0 if additional else 0.0,
        non_uk_resident_surcharge=0.0,
        explanation=explanation_additional if additional else explanation_standard,
    )


# ----- Capital gains tax on residential property -----

CGT_ANNUAL_EXEMPT_AMOUNT = 3_000.0
CGT_BASIC_RATE_LIMIT = 50_270.0
CGT_BASIC_RATE_PCT = 18.0
CGT_HIGHER_RATE_PCT = 24.0
# final months of ownership always qualify for residence relief
PRR_FINAL_PERIOD_MONTHS = 9
CGT_REPORTING_DAYS = 60


class MainResidence(str, Enum):
    never = "never"
    entire = "entire"
    partial = "partial"


@dataclass(frozen=True)
class CgtInput:
    purchase_price: float
    sale_price: float
    sale_date: date
    purchase_costs: float = 0.0
    sale_costs: float = 0.0
    improvement_costs: float = 0.0
    was_main_residence: MainResidence = MainResidence.never
    months_lived_in: int = 0
    total_ownership_months: int = 0
    annual_income: float = 0.0
    allowance_used: float = 0.0
    ownership_split: float = 100.0  # % of the property owned


@dataclass(frozen=True)
class CgtBreakdown:
    basic_rate_portion: float
    basic_rate_tax: float
    higher_rate_portion: float
    higher_rate_tax: float


@dataclass(frozen=True)
class CgtResult:
    gross_gain: float
    private_residence_relief: float
    lettings_relief: float
    chargeable_gain: float
    annual_allowance: float
    taxable_gain: float
    cgt_due: float
    your_share: float
    effective_rate: float
    reporting_deadline: date
    payment_deadline: date
    breakdown: CgtBreakdown


def _payment_deadline(sale_date: date) -> date:
    # tax year ends 5 April; pay by 31 January after the end of that tax year
    start_year = sale_date.year if sale_date > date(sale_date.year, 4, 5) else sale_date.year - 1
    return date(start_year + 2, 1, 31)


def calculate_cgt(inp: CgtInput) -> CgtResult:
    """
    Residential CGT for an individual: gain after costs, private residence relief
    (time lived in plus the final 9 months), the annual exempt amount, then 18%
    up to the unused basic-rate band and 24% above it. Lettings relief is taken
    as nil.
    """
    for name in ("purchase_price", "sale_price", "purchase_costs", "sale_costs", "improvement_costs",
                 "annual_income", "allowance_used", "months_lived_in"):
        require_non_negative(name, getattr(inp, name))
    split = require_percent("ownership_split", inp.ownership_split)
    try:
        residence = MainResidence(inp.was_main_residence)
    except ValueError:
        raise InvalidArgument(f"unknown main residence status: {inp.was_main_residence}")

    gross = inp.sale_price - inp.purchase_price - inp.purchase_costs - inp.improvement_costs - inp.sale_costs

    prr = 0.0
    if residence == MainResidence.entire:
        prr = gross
    elif residence == MainResidence.partial and inp.months_lived_in > 0:
        owned = require_positive("total_ownership_months", inp.total_ownership_months)
        share = min((inp.months_lived_in + PRR_FINAL_PERIOD_MONTHS) / owned, 1.0)
        prr = round_half_up(gross * share)

    lettings = 0.0
    chargeable = max(0.0, gross - prr - lettings)
    allowance = max(0.0, CGT_ANNUAL_EXEMPT_AMOUNT - inp.allowance_used)
    taxable = max(0.0, chargeable - allowance)

    basic_portion = min(taxable, max(0.0, CGT_BASIC_RATE_LIMIT - inp.annual_income))
    higher_portion = max(0.0, taxable - basic_portion)
    basic_tax = basic_portion * CGT_BASIC_RATE_PCT / 100.0
    higher_tax = higher_portion * CGT_HIGHER_RATE_PCT / 100.0
    due = round_half_up(basic_tax + higher_tax)

    return CgtResult(
        gross_gain=gross,
        private_residence_relief=prr,
        lettings_relief=lettings,
        chargeable_gain=chargeable,
        annual_allowance=allowance,
        taxable_gain=taxable,
        cgt_due=due,
        your_share=round_half_up(due * split / 100.0),
        effective_rate=due / gross * 100.0 if gross > 0 else 0.0,
        reporting_deadline=inp.sale_date + timedelta(days=CGT_REPORTING_DAYS),
        payment_deadline=_payment_deadline(inp.sale_date),
        breakdown=CgtBreakdown(
            basic_rate_portion=basic_portion,
            basic_rate_tax=round_half_up(basic_tax),
            higher_rate_portion=higher_portion,
            higher_rate_tax=round_half_up(higher_tax),
        ),
    )
