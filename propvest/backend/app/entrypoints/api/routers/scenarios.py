# app/entrypoints/api/routers/scenarios.py
from __future__ import annotations

from fastapi import APIRouter

from ....schemas import (
    BTLIn,
    MonteCarloIn,
    MonteCarloOut,
    ScenarioMetricsOut,
    StressTestIn,
    StressTestRowOut,
    VariationIn,
    VariationOut,
)
from ....service_layer import calculations as calc

router = APIRouter(prefix="/scenarios", tags=["scenarios"])


@router.post("/metrics", response_model=ScenarioMetricsOut)
def metrics(body: BTLIn) -> ScenarioMetricsOut:
    return calc.scenario_metrics(body)


@router.post("/compare", response_model=VariationOut)
def compare(body: VariationIn) -> VariationOut:
    """
    What-if: apply `changes` to the base BTL inputs and return both sets of
    metrics plus the deltas.
    """
    return calc.variation(body.base, body.changes)


@router.post("/stress-test", response_model=list[StressTestRowOut])
def stress_test(body: StressTestIn) -> list[StressTestRowOut]:
    return calc.stress_test(body.inputs, body.rate_increases)


@router.post("/monte-carlo", response_model=MonteCarloOut)
def monte_carlo(body: MonteCarloIn) -> MonteCarloOut:
    """
    Simulate the BTL deal `iterations` times with randomised rate, rent, voids and
    maintenance. Give a `seed` for a repeatable run.
    """
    return calc.monte_carlo(body)
