from pydantic import BaseModel, Field, field_validator
from datetime import date
from typing import Any, Literal

from .domain.parsing import parse_currency

Strategy = Literal["btl", "brr", "hmo", "flip"]
Location = Literal["england", "scotland", "wales"]

Money = float
Percent = float


def _coerce_formatted(v: Any) -> Any:
    # "£250,000" from a form field -> 250000.0; anything unparseable is left for pydantic to reject
    if isinstance(v, str):
        parsed = parse_currency(v)
        return v if parsed is None else parsed
    if isinstance(v, list):
        return [_coerce_formatted(x) for x in v]
    return v


class CalcIn(BaseModel):
    """Base for calculator bodies: accepts currency-formatted strings for numbers."""

    @field_validator("*", mode="before")
    @classmethod
    def _formatted_numbers(cls, v: Any) -> Any:
        return _coerce_formatted(v)


# ----- BTL -----

class BTLIn(CalcIn):
    purchase_price: Money = Field(250000.0, gt=0)
    deposit_percent: Percent = Field(25.0, ge=0, le=100)
    mortgage_rate: Percent = Field(5.5, ge=0, le=100)
    mortgage_term: int = Field(25, gt=0, le=50)
    legal_fees: Money = Field(1500.0, ge=0)
    survey_fees: Money = Field(500.0, ge=0)
    broker_fees: Money = Field(500.0, ge=0)
    refurb_costs: Money = Field(0.0, ge=0)

    monthly_rent: Money = Field(1200.0, gt=0)
    void_percent: Percent = Field(5.0, ge=0, le=100)
    letting_agent_fee: Percent = Field(8.0, ge=0, le=100)
    management_fee: Percent = Field(10.0, ge=0, le=100)

    insurance: Money = Field(300.0, ge=0)
    maintenance_percent: Percent = Field(10.0, ge=0, le=100)
    service_charge: Money = Field(0.0, ge=0)
    ground_rent: Money = Field(0.0, ge=0)


class BTLCostBreakdownOut(BaseModel):
    mortgage: float
    insurance: float
    letting_agent: float
    management: float
    maintenance: float
    service_charge: float
    ground_rent: float


class BTLOut(BaseModel):
    deposit_amount: float
    mortgage_amount: float
    stamp_duty: float
    total_cash_required: float
    monthly_mortgage: float
    effective_annual_rent: float
    total_annual_costs: float
    annual_cash_flow: float
    monthly_cash_flow: float
    gross_yield: float
    net_yield: float
    roi: float
    break_even_occupancy: float
    cost_breakdown: BTLCostBreakdownOut


# ----- BRR -----

class BRRIn(CalcIn):
    purchase_price: Money = Field(150000.0, ge=0)
    refurb_budget: Money = Field(30000.0, ge=0)
    refurb_timeline: int = Field(3, ge=0, le=60)
    bridging_rate: Percent = Field(0.75, ge=0, le=100)
    bridging_fee: Percent = Field(2.0, ge=0, le=100)

    estimated_arv: Money = Field(220000.0, ge=0)
    new_mortgage_ltv: Percent = Field(75.0, ge=0, le=100)
    new_mortgage_rate: Percent = Field(5.5, ge=0, le=100)
    new_mortgage_term: int = Field(25, gt=0, le=50)

    monthly_rent: Money = Field(1100.0, ge=0)
    void_percent: Percent = Field(5.0, ge=0, le=100)
    management_fee: Percent = Field(10.0, ge=0, le=100)
    insurance: Money = Field(350.0, ge=0)
    maintenance_percent: Percent = Field(10.0, ge=0, le=100)


class RatioOut(BaseModel):
    kind: Literal["finite", "infinite", "undefined"]
    value: float | None = None


class BRROut(BaseModel):
    total_initial_cost: float
    bridging_amount: float
    cash_required: float
    bridging_interest: float
    bridging_fee_amount: float
    total_bridging_costs: float
    new_mortgage_amount: float
    cash_out_at_refinance: float
    cash_left_in_deal: float
    equity_gained: float
    monthly_mortgage: float
    effective_annual_rent: float
    total_annual_costs: float
    annual_cash_flow: float
    monthly_cash_flow: float
    cash_on_cash_return: RatioOut


# ----- HMO -----

class HMOIn(CalcIn):
    purchase_price: Money = Field(200000.0, gt=0)
    refurb_costs: Money = Field(20000.0, ge=0)
    conversion_costs: Money = Field(15000.0, ge=0)
    licensing_fees: Money = Field(1000.0, ge=0)
    deposit_percent: Percent = Field(25.0, ge=0, le=100)
    mortgage_rate: Percent = Field(6.0, ge=0, le=100)
    mortgage_term: int = Field(25, gt=0, le=50)

    room_rents: list[Money] = Field(default_factory=lambda: [650.0, 650.0, 600.0, 600.0, 550.0])
    number_of_rooms: int | None = Field(None, ge=0)
    bills_included: bool = True
    utility_costs: Money = Field(400.0, ge=0)

    management_fee: Percent = Field(15.0, ge=0, le=100)
    insurance: Money = Field(600.0, ge=0)
    safety_certificates: Money = Field(500.0, ge=0)
    maintenance_reserve: Percent = Field(12.0, ge=0, le=100)


class HMOComparisonOut(BaseModel):
    hmo_monthly_profit: float
    btl_monthly_profit: float
    difference: float


class HMOOut(BaseModel):
    total_purchase_cost: float
    deposit_amount: float
    mortgage_amount: float
    stamp_duty: float
    total_cash_required: float
    number_of_rooms: int
    total_monthly_rent: float
    annual_gross_rent: float
    monthly_mortgage: float
    total_annual_costs: float
    annual_cash_flow: float
    monthly_profit: float
    gross_yield: float
    net_yield: float
    roi: float
    btl_comparison: HMOComparisonOut


# ----- Flip -----

class FlipIn(CalcIn):
    purchase_price: Money = Field(180000.0, gt=0)
    refurb_budget: Money = Field(40000.0, ge=0)
    refurb_timeline: int = Field(4, gt=0, le=60)
    bridging_rate: Percent = Field(0.75, ge=0, le=100)
    bridging_fee: Percent = Field(2.0, ge=0, le=100)
    legal_fees: Money = Field(3000.0, ge=0)
    estate_agent_fee: Percent = Field(1.5, ge=0, le=100)
    target_sale_price: Money = Field(280000.0, gt=0)


class FlipOut(BaseModel):
    total_costs: float
    bridging_amount: float
    cash_required: float
    bridging_interest: float
    bridging_fee_amount: float
    stamp_duty: float
    agent_fee: float
    total_project_costs: float
    gross_profit: float
    profit_margin: float
    roi_on_cash: float
    monthly_roi: float


# ----- Building blocks -----

class StampDutyIn(CalcIn):
    price: Money = Field(..., ge=0)
    is_additional_property: bool = False


class StampDutyOut(BaseModel):
    price: float
    is_additional_property: bool
    stamp_duty: float


class MortgagePaymentIn(CalcIn):
    principal: Money = Field(..., ge=0)
    annual_rate_percent: Percent = Field(..., ge=0, le=100)
    term_years: int = Field(..., gt=0, le=50)


class MortgagePaymentOut(BaseModel):
    monthly_payment: float


class SdltIn(CalcIn):
    purchase_price: Money = Field(..., ge=0)
    location: Location = "england"
    is_first_time_buyer: bool = False
    is_additional_property: bool = False
    is_non_uk_resident: bool = False
    is_company_purchase: bool = False
    is_high_value_company_purchase: bool = False


class SdltBandOut(BaseModel):
    band: str
    rate: float
    taxable_amount: float
    tax: float


class SdltOut(BaseModel):
    total_sdlt: float
    effective_rate: float
    breakdown: list[SdltBandOut]
    standard_sdlt: float
    additional_property_surcharge: float
    non_uk_resident_surcharge: float
    explanation: str


# ----- Scenarios -----

class ScenarioMetricsOut(BaseModel):
    monthly_cash_flow: float
    annual_cash_flow: float
    gross_yield: float
    net_yield: float
    roi: float
    total_cash_required: float
    monthly_mortgage: float
    break_even_rent: float


class VariationIn(BaseModel):
    base: BTLIn
    changes: dict[str, Any] = Field(default_factory=dict)


class VariationOut(BaseModel):
    changes: dict[str, Any]
    base: ScenarioMetricsOut
    variation: ScenarioMetricsOut
    deltas: dict[str, float]


class StressTestIn(BaseModel):
    inputs: BTLIn
    rate_increases: list[float] | None = None


class StressTestRowOut(BaseModel):
    rate: float
    monthly_payment: float
    monthly_cash_flow: float
    status: Literal["positive", "warning", "negative"]


class VariableRangeIn(BaseModel):
    min: float
    max: float
    most_likely: float
    distribution: Literal["normal", "uniform", "triangular"] = "normal"


class SimulationRangesIn(BaseModel):
    mortgage_rate: VariableRangeIn
    monthly_rent: VariableRangeIn
    void_percent: VariableRangeIn
    maintenance_percent: VariableRangeIn


class MonteCarloIn(BaseModel):
    inputs: BTLIn
    iterations: int = Field(1000, gt=0)
    seed: int | None = None
    # None -> ranges derived from the inputs
    ranges: SimulationRangesIn | None = None
    thresholds: list[float] | None = None


class MetricStatsOut(BaseModel):
    mean: float
    median: float
    mode: float
    std_dev: float
    min: float
    max: float
    percentile_10: float
    percentile_25: float
    percentile_75: float
    percentile_90: float


class SimulationStatsOut(BaseModel):
    monthly_cash_flow: MetricStatsOut
    net_yield: MetricStatsOut
    roi: MetricStatsOut


class ThresholdProbabilityOut(BaseModel):
    threshold: float
    probability: float


class MonteCarloOut(BaseModel):
    iterations: int
    stats: SimulationStatsOut
    probabilities: list[ThresholdProbabilityOut]


# ----- CGT -----

class CgtIn(CalcIn):
    purchase_price: Money = Field(..., ge=0)
    sale_price: Money = Field(..., ge=0)
    sale_date: date
    purchase_costs: Money = Field(0.0, ge=0)
    sale_costs: Money = Field(0.0, ge=0)
    improvement_costs: Money = Field(0.0, ge=0)
    was_main_residence: Literal["never", "entire", "partial"] = "never"
    months_lived_in: int = Field(0, ge=0)
    total_ownership_months: int = Field(0, ge=0)
    annual_income: Money = Field(0.0, ge=0)
    allowance_used: Money = Field(0.0, ge=0)
    ownership_split: Percent = Field(100.0, ge=0, le=100)


class CgtBreakdownOut(BaseModel):
    basic_rate_portion: float
    basic_rate_tax: float
    higher_rate_portion: float
    higher_rate_tax: float


class CgtOut(BaseModel):
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
    breakdown: CgtBreakdownOut
