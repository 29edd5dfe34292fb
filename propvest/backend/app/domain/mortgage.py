# app/domain/mortgage.py
from __future__ import annotations

from .policies import require_non_negative, require_positive
from .rounding import round_half_up


def compute_amortized_payment(principal: float, annual_rate_percent: float, term_years: float) -> float:
    """
    Fixed-rate repayment mortgage, monthly payment rounded to pence.
    A 0% rate is a straight principal / n split and is returned unrounded.
    """
    p = require_non_negative("principal", principal)
    rate = require_non_negative("annual_rate_percent", annual_rate_percent)
    years = require_positive("term_years", term_years)

    r = rate / 100.0 / 12.0
    n = years * 12.0
    if r == 0:
        return p / n

    growth = (1 + r) ** n
    payment = p * (r * growth) / (growth - 1)
    return round_half_up(payment, 2)


def bridging_costs(amount: float, monthly_rate_percent: float, months: float, fee_percent: float) -> tuple[float, float]:
    """
    Rolled-up bridging finance: simple (non-compounding) monthly interest over the
    term plus an arrangement fee on the loan. Returns (interest, fee).
    """
    a = require_non_negative("bridging_amount", amount)
    interest = a * (require_non_negative("bridging_rate", monthly_rate_percent) / 100.0) * require_non_negative(
        "refurb_timeline", months
    )
    fee = a * (require_non_negative("bridging_fee", fee_percent) / 100.0)
    return interest, fee
