# app/domain/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


class Strategy(str, Enum):
    btl = "btl"
    brr = "brr"
    hmo = "hmo"
    flip = "flip"


class RatioKind(str, Enum):
    finite = "finite"
    infinite = "infinite"
    undefined = "undefined"


@dataclass(frozen=True)
class Ratio:
    """
    Percentage ratio that may legitimately have no finite value.

    BRR deals that pull all cash out at refinance have an infinite
    cash-on-cash return; that is a result, not an error, so it is carried
    as a tag instead of a float inf.
    """

    kind: RatioKind
    value: float | None = None

    @classmethod
    def finite(cls, value: float) -> Ratio:
        return cls(RatioKind.finite, float(value))

    @classmethod
    def infinite(cls) -> Ratio:
        return cls(RatioKind.infinite, None)

    @classmethod
    def undefined(cls) -> Ratio:
        return cls(RatioKind.undefined, None)

    @property
    def is_finite(self) -> bool:
        return self.kind == RatioKind.finite


# ----- Inputs (one variant per strategy) -----
# Money in GBP, percentages as 0-100. Defaults mirror the calculator's
# starting form values.


@dataclass(frozen=True)
class BTLInputs:
    strategy: ClassVar[Strategy] = Strategy.btl

    purchase_price: float = 250000.0
    deposit_percent: float = 25.0
    mortgage_rate: float = 5.5
    mortgage_term: int = 25
    legal_fees: float = 1500.0
    survey_fees: float = 500.0
    broker_fees: float = 500.0
    refurb_costs: float = 0.0

    monthly_rent: float = 1200.0
    void_percent: float = 5.0
    letting_agent_fee: float = 8.0
    management_fee: float = 10.0

    insurance: float = 300.0
    maintenance_percent: float = 10.0
    service_charge: float = 0.0
    ground_rent: float = 0.0


@dataclass(frozen=True)
class BRRInputs:
    strategy: ClassVar[Strategy] = Strategy.brr

    # stage 1: purchase + bridging
    purchase_price: float = 150000.0
    refurb_budget: float = 30000.0
    refurb_timeline: int = 3  # months
    bridging_rate: float = 0.75  # % per month
    bridging_fee: float = 2.0

    # stage 2: refinance
    estimated_arv: float = 220000.0
    new_mortgage_ltv: float = 75.0
    new_mortgage_rate: float = 5.5
    new_mortgage_term: int = 25

    # rental after refinance
    monthly_rent: float = 1100.0
    void_percent: float = 5.0
    management_fee: float = 10.0
    insurance: float = 350.0
    maintenance_percent: float = 10.0


@dataclass(frozen=True)
class HMOInputs:
    strategy: ClassVar[Strategy] = Strategy.hmo

    purchase_price: float = 200000.0
    refurb_costs: float = 20000.0
    conversion_costs: float = 15000.0
    licensing_fees: float = 1000.0
    deposit_percent: float = 25.0
    mortgage_rate: float = 6.0
    mortgage_term: int = 25

    room_rents: tuple[float, ...] = (650.0, 650.0, 600.0, 600.0, 550.0)
    number_of_rooms: int | None = None  # None => len(room_rents)
    bills_included: bool = True
    utility_costs: float = 400.0  # per month

    management_fee: float = 15.0
    insurance: float = 600.0
    safety_certificates: float = 500.0
    maintenance_reserve: float = 12.0


@dataclass(frozen=True)
class FlipInputs:
    strategy: ClassVar[Strategy] = Strategy.flip

    purchase_price: float = 180000.0
    refurb_budget: float = 40000.0
    refurb_timeline: int = 4  # months
    bridging_rate: float = 0.75  # % per month
    bridging_fee: float = 2.0
    legal_fees: float = 3000.0
    estate_agent_fee: float = 1.5
    target_sale_price: float = 280000.0


StrategyInputs = Union[BTLInputs, BRRInputs, HMOInputs, FlipInputs]


# ----- Results -----


@dataclass(frozen=True)
class BTLCostBreakdown:
    mortgage: float
    insurance: float
    letting_agent: float
    management: float
    maintenance: float
    service_charge: float
    ground_rent: float


@dataclass(frozen=True)
class BTLResult:
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
    cost_breakdown: BTLCostBreakdown


@dataclass(frozen=True)
class BRRResult:
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
    cash_on_cash_return: Ratio


@dataclass(frozen=True)
class HMOBTLComparison:
    """Rough single-let benchmark; not a calibrated model."""

    hmo_monthly_profit: float
    btl_monthly_profit: float
    difference: float


@dataclass(frozen=True)
class HMOResult:
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
    btl_comparison: HMOBTLComparison


@dataclass(frozen=True)
class FlipResult:
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


CalculationResult = Union[BTLResult, BRRResult, HMOResult, FlipResult]
