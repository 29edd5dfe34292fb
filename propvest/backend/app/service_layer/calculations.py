# app/service_layer/calculations.py
from __future__ import annotations

import logging
import random
from dataclasses import asdict
from enum import Enum
from typing import Any, Iterable

from pydantic import ValidationError

from ..config import settings
from ..domain.calculators import compute_brr, compute_btl, compute_flip, compute_hmo, default_inputs
from ..domain.mortgage import compute_amortized_payment
from ..domain.policies import InvalidArgument
from ..domain.scenario import (
    Distribution,
    SimulationRanges,
    VariableRange,
    cash_flow_probabilities,
    compare_variation,
    compute_scenario_metrics,
    run_monte_carlo,
    run_stress_test,
)
from ..domain.tax import (
    CgtInput,
    Location,
    MainResidence,
    SdltInput,
    calculate_cgt,
    calculate_sdlt,
    compute_transfer_tax,
)
from ..domain.types import BRRInputs, BTLInputs, FlipInputs, HMOInputs
from ..schemas import (
    BRRIn,
    BRROut,
    BTLIn,
    BTLOut,
    CgtIn,
    CgtOut,
    FlipIn,
    FlipOut,
    HMOIn,
    HMOOut,
    MortgagePaymentIn,
    MortgagePaymentOut,
    MonteCarloIn,
    MonteCarloOut,
    ScenarioMetricsOut,
    SdltIn,
    SdltOut,
    SimulationRangesIn,
    SimulationStatsOut,
    StampDutyIn,
    StampDutyOut,
    StressTestRowOut,
    ThresholdProbabilityOut,
    VariationOut,
)

log = logging.getLogger(__name__)


def _check_caps(purchase_price: float | None = None, monthly_rent: float | None = None) -> None:
    if purchase_price is not None and purchase_price > settings.MAX_PURCHASE_PRICE:
        raise InvalidArgument(f"purchase_price above supported maximum of {settings.MAX_PURCHASE_PRICE:,.0f}")
    if monthly_rent is not None and monthly_rent > settings.MAX_MONTHLY_RENT:
        raise InvalidArgument(f"monthly_rent above supported maximum of {settings.MAX_MONTHLY_RENT:,.0f}")


# ----- schema -> domain -----

def btl_inputs(body: BTLIn) -> BTLInputs:
    _check_caps(body.purchase_price, body.monthly_rent)
    return BTLInputs(**body.model_dump())


def brr_inputs(body: BRRIn) -> BRRInputs:
    _check_caps(body.purchase_price, body.monthly_rent)
    return BRRInputs(**body.model_dump())


def hmo_inputs(body: HMOIn) -> HMOInputs:
    _check_caps(body.purchase_price, sum(body.room_rents))
    if len(body.room_rents) > settings.MAX_ROOMS:
        raise InvalidArgument(f"at most {settings.MAX_ROOMS} rooms supported")
    data = body.model_dump()
    data["room_rents"] = tuple(body.room_rents)
    return HMOInputs(**data)


def flip_inputs(body: FlipIn) -> FlipInputs:
    _check_caps(body.purchase_price)
    return FlipInputs(**body.model_dump())


def _plain(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, dict):
        return {k: _plain(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    return v


def _logged(name: str, result: Any) -> dict[str, Any]:
    out = _plain(asdict(result))
    log.debug("%s calculated: %s", name, out)
    return out


# ----- use cases -----

def calculate_btl(body: BTLIn) -> BTLOut:
    return BTLOut(**_logged("btl", compute_btl(btl_inputs(body))))


def calculate_brr(body: BRRIn) -> BRROut:
    return BRROut(**_logged("brr", compute_brr(brr_inputs(body))))


def calculate_hmo(body: HMOIn) -> HMOOut:
    return HMOOut(**_logged("hmo", compute_hmo(hmo_inputs(body))))


def calculate_flip(body: FlipIn) -> FlipOut:
    return FlipOut(**_logged("flip", compute_flip(flip_inputs(body))))


def stamp_duty(body: StampDutyIn) -> StampDutyOut:
    _check_caps(body.price)
    tax = compute_transfer_tax(body.price, body.is_additional_property)
    return StampDutyOut(price=body.price, is_additional_property=body.is_additional_property, stamp_duty=tax)


def mortgage_payment(body: MortgagePaymentIn) -> MortgagePaymentOut:
    payment = compute_amortized_payment(body.principal, body.annual_rate_percent, body.term_years)
    return MortgagePaymentOut(monthly_payment=payment)


def sdlt(body: SdltIn) -> SdltOut:
    _check_caps(body.purchase_price)
    data = body.model_dump()
    data["location"] = Location(body.location)
    return SdltOut(**_logged("sdlt", calculate_sdlt(SdltInput(**data))))


def cgt(body: CgtIn) -> CgtOut:
    _check_caps(max(body.purchase_price, body.sale_price))
    data = body.model_dump()
    data["was_main_residence"] = MainResidence(body.was_main_residence)
    return CgtOut(**_logged("cgt", calculate_cgt(CgtInput(**data))))


def defaults_for(strategy: str) -> dict[str, Any]:
    d = asdict(default_inputs(strategy))
    if "room_rents" in d:
        d["room_rents"] = list(d["room_rents"])
    return d


# ----- scenarios -----

def scenario_metrics(body: BTLIn) -> ScenarioMetricsOut:
    return ScenarioMetricsOut(**asdict(compute_scenario_metrics(btl_inputs(body))))


def variation(base: BTLIn, changes: dict[str, Any]) -> VariationOut:
    unknown = sorted(set(changes) - set(BTLIn.model_fields))
    if unknown:
        raise InvalidArgument(f"unknown BTL field(s): {', '.join(unknown)}")

    # run the changed values through the same validation as a full request
    try:
        varied = BTLIn(**{**base.model_dump(), **changes})
    except ValidationError as e:
        raise InvalidArgument(f"invalid change: {e.errors()[0].get('msg')}") from e
    _check_caps(varied.purchase_price, varied.monthly_rent)
    clean = {k: getattr(varied, k) for k in changes}

    cmp = compare_variation(btl_inputs(base), clean)
    log.debug("variation %s -> deltas %s", clean, cmp.deltas)
    return VariationOut(
        changes=cmp.changes,
        base=ScenarioMetricsOut(**asdict(cmp.base)),
        variation=ScenarioMetricsOut(**asdict(cmp.variation)),
        deltas=cmp.deltas,
    )


def stress_test(body: BTLIn, rate_increases: Iterable[float] | None = None) -> list[StressTestRowOut]:
    increases = list(rate_increases) if rate_increases is not None else list(settings.STRESS_TEST_RATE_INCREASES)
    rows = run_stress_test(btl_inputs(body), increases)
    return [StressTestRowOut(**_plain(asdict(r))) for r in rows]


def _ranges(body: SimulationRangesIn) -> SimulationRanges:
    return SimulationRanges(
        **{
            name: VariableRange(
                min=r.min,
                max=r.max,
                most_likely=r.most_likely,
                distribution=Distribution(r.distribution),
            )
            for name, r in (
                ("mortgage_rate", body.mortgage_rate),
                ("monthly_rent", body.monthly_rent),
                ("void_percent", body.void_percent),
                ("maintenance_percent", body.maintenance_percent),
            )
        }
    )


def monte_carlo(body: MonteCarloIn) -> MonteCarloOut:
    if body.iterations > settings.MAX_SIMULATION_ITERATIONS:
        raise InvalidArgument(f"at most {settings.MAX_SIMULATION_ITERATIONS:,} iterations supported")

    rng = random.Random(body.seed) if body.seed is not None else random.Random()
    sim = run_monte_carlo(
        btl_inputs(body.inputs),
        _ranges(body.ranges) if body.ranges is not None else None,
        iterations=body.iterations,
        rng=rng,
    )
    thresholds = body.thresholds if body.thresholds is not None else settings.MONTE_CARLO_THRESHOLDS
    probs = cash_flow_probabilities([it.monthly_cash_flow for it in sim.iterations], thresholds)
    log.debug("monte carlo x%d seed=%s -> %s", body.iterations, body.seed, probs)

    return MonteCarloOut(
        iterations=len(sim.iterations),
        stats=SimulationStatsOut(**asdict(sim.stats)),
        probabilities=[ThresholdProbabilityOut(threshold=t, probability=p) for t, p in probs.items()],
    )
