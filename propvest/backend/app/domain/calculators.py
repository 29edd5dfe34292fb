# app/domain/calculators.py
from __future__ import annotations

import math

from .mortgage import bridging_costs, compute_amortized_payment
from .policies import (
    InvalidArgument,
    require_non_negative,
    require_percent,
    require_positive,
)
from .tax import compute_transfer_tax
from .types import (
    BRRInputs,
    BRRResult,
    BTLCostBreakdown,
    BTLInputs,
    BTLResult,
    CalculationResult,
    FlipInputs,
    FlipResult,
    HMOBTLComparison,
    HMOInputs,
    HMOResult,
    Ratio,
    Strategy,
    StrategyInputs,
)

# Fixed lender assumptions for bridging finance.
BRR_BRIDGING_LTV = 0.75
FLIP_BRIDGING_LTV = 0.70

# Single-let benchmark for HMO deals: rent at 0.5% of price per month, 20% expenses.
SINGLE_LET_RENT_FACTOR = 0.005
SINGLE_LET_EXPENSE_RATIO = 0.20


def _share(amount: float, percent: float) -> float:
    return amount * (percent / 100.0)


def _pct_of(numerator: float, denominator: float, what: str) -> float:
    if denominator <= 0:
        raise InvalidArgument(f"{what} must be > 0 to compute a percentage (got {denominator})")
    return numerator / denominator * 100.0


def compute_btl(inputs: BTLInputs) -> BTLResult:
    price = require_positive("purchase_price", inputs.purchase_price)
    rent = require_positive("monthly_rent", inputs.monthly_rent)
    for name in ("legal_fees", "survey_fees", "broker_fees", "refurb_costs", "insurance", "service_charge", "ground_rent"):
        require_non_negative(name, getattr(inputs, name))
    for name in ("deposit_percent", "void_percent", "letting_agent_fee", "management_fee", "maintenance_percent"):
        require_percent(name, getattr(inputs, name))

    deposit = _share(price, inputs.deposit_percent)
    mortgage_amount = price - deposit
    stamp_duty = compute_transfer_tax(price, True)

    total_cash = (
        deposit
        + stamp_duty
        + inputs.legal_fees
        + inputs.survey_fees
        + inputs.broker_fees
        + inputs.refurb_costs
    )

    monthly_mortgage = compute_amortized_payment(mortgage_amount, inputs.mortgage_rate, inputs.mortgage_term)

    # income net of voids
    effective_rent = rent * 12 * (1 - inputs.void_percent / 100.0)

    letting_agent = _share(effective_rent, inputs.letting_agent_fee)
    management = _share(effective_rent, inputs.management_fee)
    maintenance = _share(effective_rent, inputs.maintenance_percent)
    annual_mortgage = monthly_mortgage * 12
    total_costs = (
        annual_mortgage
        + inputs.insurance
        + letting_agent
        + management
        + maintenance
        + inputs.service_charge
        + inputs.ground_rent
    )

    annual_cf = effective_rent - total_costs

    return BTLResult(
        deposit_amount=deposit,
        mortgage_amount=mortgage_amount,
        stamp_duty=stamp_duty,
        total_cash_required=total_cash,
        monthly_mortgage=monthly_mortgage,
        effective_annual_rent=effective_rent,
        total_annual_costs=total_costs,
        annual_cash_flow=annual_cf,
        monthly_cash_flow=annual_cf / 12,
        gross_yield=_pct_of(rent * 12, price, "purchase_price"),
        net_yield=_pct_of(annual_cf, price, "purchase_price"),
        roi=_pct_of(annual_cf, total_cash, "total_cash_required"),
        # occupancy at which rent exactly covers costs
        break_even_occupancy=_pct_of(total_costs, rent * 12, "annual rent"),
        cost_breakdown=BTLCostBreakdown(
            mortgage=annual_mortgage,
            insurance=inputs.insurance,
            letting_agent=letting_agent,
            management=management,
            maintenance=maintenance,
            service_charge=inputs.service_charge,
            ground_rent=inputs.ground_rent,
        ),
    )


def compute_brr(inputs: BRRInputs) -> BRRResult:
    """
    Buy, refurbish, refinance in two stages.

    Stage 1 funds the purchase with a bridging loan at a fixed 75% LTV and rolls up
    interest over the refurb timeline. Stage 2 refinances onto a term mortgage sized
    from the after-repair value, then the property is let. Cash left in the deal can
    go negative when the refinance returns more than was put in.
    """
    price = require_non_negative("purchase_price", inputs.purchase_price)
    for name in ("refurb_budget", "estimated_arv", "monthly_rent", "insurance"):
        require_non_negative(name, getattr(inputs, name))
    for name in ("new_mortgage_ltv", "void_percent", "management_fee", "maintenance_percent"):
        require_percent(name, getattr(inputs, name))

    total_initial = price + inputs.refurb_budget
    bridging_amount = price * BRR_BRIDGING_LTV
    cash_required = total_initial - bridging_amount

    interest, fee = bridging_costs(bridging_amount, inputs.bridging_rate, inputs.refurb_timeline, inputs.bridging_fee)
    total_bridging = interest + fee

    new_mortgage = _share(inputs.estimated_arv, inputs.new_mortgage_ltv)
    cash_out = new_mortgage - bridging_amount - total_bridging
    cash_left = total_initial - new_mortgage + total_bridging
    equity_gained = inputs.estimated_arv - total_initial - total_bridging

    monthly_mortgage = compute_amortized_payment(new_mortgage, inputs.new_mortgage_rate, inputs.new_mortgage_term)
    effective_rent = inputs.monthly_rent * 12 * (1 - inputs.void_percent / 100.0)
    management = _share(effective_rent, inputs.management_fee)
    maintenance = _share(effective_rent, inputs.maintenance_percent)
    total_costs = monthly_mortgage * 12 + inputs.insurance + management + maintenance
    annual_cf = effective_rent - total_costs

    if cash_left > 0:
        coc = Ratio.finite(annual_cf / cash_left * 100.0)
    else:
        coc = Ratio.infinite()

    return BRRResult(
        total_initial_cost=total_initial,
        bridging_amount=bridging_amount,
        cash_required=cash_required,
        bridging_interest=interest,
        bridging_fee_amount=fee,
        total_bridging_costs=total_bridging,
        new_mortgage_amount=new_mortgage,
        cash_out_at_refinance=cash_out,
        cash_left_in_deal=cash_left,
        equity_gained=equity_gained,
        monthly_mortgage=monthly_mortgage,
        effective_annual_rent=effective_rent,
        total_annual_costs=total_costs,
        annual_cash_flow=annual_cf,
        monthly_cash_flow=annual_cf / 12,
        cash_on_cash_return=coc,
    )


def _room_count(inputs: HMOInputs) -> int:
    declared = inputs.number_of_rooms
    actual = len(inputs.room_rents)
    if declared is None:
        return actual
    if declared != actual:
        raise InvalidArgument(f"number_of_rooms={declared} but {actual} room rents supplied")
    return declared


def compute_hmo(inputs: HMOInputs) -> HMOResult:
    price = require_positive("purchase_price", inputs.purchase_price)
    for name in ("refurb_costs", "conversion_costs", "licensing_fees", "utility_costs", "insurance", "safety_certificates"):
        require_non_negative(name, getattr(inputs, name))
    for name in ("deposit_percent", "management_fee", "maintenance_reserve"):
        require_percent(name, getattr(inputs, name))
    rooms = _room_count(inputs)
    for i, r in enumerate(inputs.room_rents):
        require_non_negative(f"room_rents[{i}]", r)

    total_purchase = price + inputs.refurb_costs + inputs.conversion_costs + inputs.licensing_fees
    deposit = _share(price, inputs.deposit_percent)
    mortgage_amount = price - deposit
    stamp_duty = compute_transfer_tax(price, True)

    total_cash = deposit + stamp_duty + inputs.refurb_costs + inputs.conversion_costs + inputs.licensing_fees

    monthly_rent = math.fsum(inputs.room_rents)
    # no void deduction for HMOs
    annual_rent = monthly_rent * 12

    monthly_mortgage = compute_amortized_payment(mortgage_amount, inputs.mortgage_rate, inputs.mortgage_term)
    annual_mortgage = monthly_mortgage * 12
    management = _share(annual_rent, inputs.management_fee)
    maintenance = _share(annual_rent, inputs.maintenance_reserve)
    utilities = inputs.utility_costs * 12 if inputs.bills_included else 0.0

    total_costs = annual_mortgage + inputs.insurance + management + maintenance + inputs.safety_certificates + utilities
    annual_cf = annual_rent - total_costs
    monthly_profit = annual_cf / 12

    single_let_annual = price * SINGLE_LET_RENT_FACTOR * 12
    single_let_cf = single_let_annual - (annual_mortgage + inputs.insurance + single_let_annual * SINGLE_LET_EXPENSE_RATIO)
    single_let_monthly = single_let_cf / 12

    return HMOResult(
        total_purchase_cost=total_purchase,
        deposit_amount=deposit,
        mortgage_amount=mortgage_amount,
        stamp_duty=stamp_duty,
        total_cash_required=total_cash,
        number_of_rooms=rooms,
        total_monthly_rent=monthly_rent,
        annual_gross_rent=annual_rent,
        monthly_mortgage=monthly_mortgage,
        total_annual_costs=total_costs,
        annual_cash_flow=annual_cf,
        monthly_profit=monthly_profit,
        gross_yield=_pct_of(annual_rent, total_purchase, "total_purchase_cost"),
        net_yield=_pct_of(annual_cf, total_purchase, "total_purchase_cost"),
        roi=_pct_of(annual_cf, total_cash, "total_cash_required"),
        btl_comparison=HMOBTLComparison(
            hmo_monthly_profit=monthly_profit,
            btl_monthly_profit=single_let_monthly,
            difference=monthly_profit - single_let_monthly,
        ),
    )


def compute_flip(inputs: FlipInputs) -> FlipResult:
    price = require_positive("purchase_price", inputs.purchase_price)
    sale = require_positive("target_sale_price", inputs.target_sale_price)
    months = require_positive("refurb_timeline", inputs.refurb_timeline)
    require_non_negative("refurb_budget", inputs.refurb_budget)
    require_non_negative("legal_fees", inputs.legal_fees)
    require_percent("estate_agent_fee", inputs.estate_agent_fee)

    total_costs = price + inputs.refurb_budget
    bridging_amount = price * FLIP_BRIDGING_LTV
    cash_required = total_costs - bridging_amount

    interest, fee = bridging_costs(bridging_amount, inputs.bridging_rate, months, inputs.bridging_fee)
    stamp_duty = compute_transfer_tax(price, True)
    agent_fee = _share(sale, inputs.estate_agent_fee)

    total_project = total_costs + interest + fee + stamp_duty + inputs.legal_fees + agent_fee
    profit = sale - total_project
    roi_on_cash = _pct_of(profit, cash_required, "cash_required")

    return FlipResult(
        total_costs=total_costs,
        bridging_amount=bridging_amount,
        cash_required=cash_required,
        bridging_interest=interest,
        bridging_fee_amount=fee,
        stamp_duty=stamp_duty,
        agent_fee=agent_fee,
        total_project_costs=total_project,
        gross_profit=profit,
        profit_margin=profit / sale * 100.0,
        roi_on_cash=roi_on_cash,
        monthly_roi=roi_on_cash / months,
    )


def calculate(inputs: StrategyInputs) -> CalculationResult:
    """Run the model matching the inputs' strategy tag."""
    strategy = getattr(type(inputs), "strategy", None)
    if strategy == Strategy.btl:
        return compute_btl(inputs)  # type: ignore[arg-type]
    if strategy == Strategy.brr:
        return compute_brr(inputs)  # type: ignore[arg-type]
    if strategy == Strategy.hmo:
        return compute_hmo(inputs)  # type: ignore[arg-type]
    if strategy == Strategy.flip:
        return compute_flip(inputs)  # type: ignore[arg-type]
    raise InvalidArgument(f"no calculator for {type(inputs).__name__}")


_DEFAULTS: dict[Strategy, type] = {
    Strategy.btl: BTLInputs,
    Strategy.brr: BRRInputs,
    Strategy.hmo: HMOInputs,
    Strategy.flip: FlipInputs,
}


def default_inputs(strategy: Strategy | str) -> StrategyInputs:
    try:
        s = Strategy(strategy)
    except ValueError:
        raise InvalidArgument(f"unknown strategy: {strategy}")
    return _DEFAULTS[s]()
