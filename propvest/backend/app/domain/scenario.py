# app/domain/scenario.py
from __future__ import annotations

import json
import math
import random
import statistics
import uuid
from dataclasses import asdict, dataclass, fields, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Sequence

from .calculators import compute_btl
from .policies import InvalidArgument
from .rounding import round_half_up
from .types import BRRInputs, BTLInputs, FlipInputs, HMOInputs, Strategy, StrategyInputs


@dataclass(frozen=True)
class Scenario:
    """A saved calculation: inputs plus the bookkeeping the storage layer needs."""

    id: str
    name: str
    strategy: Strategy
    created_at: datetime
    inputs: StrategyInputs
    property_id: str | None = None


def new_scenario(
    name: str,
    inputs: StrategyInputs,
    *,
    property_id: str | None = None,
    now: datetime | None = None,
) -> Scenario:
    return Scenario(
        id=str(uuid.uuid4()),
        name=name,
        strategy=type(inputs).strategy,
        created_at=now or datetime.now(timezone.utc),
        inputs=inputs,
        property_id=property_id,
    )


# ----- JSON (camelCase keys, as stored by the web client) -----

_INPUT_TYPES: dict[Strategy, type] = {
    Strategy.btl: BTLInputs,
    Strategy.brr: BRRInputs,
    Strategy.hmo: HMOInputs,
    Strategy.flip: FlipInputs,
}

# acronyms the client keeps upper-case
_CAMEL_OVERRIDES = {
    "estimated_arv": "estimatedARV",
    "new_mortgage_ltv": "newMortgageLTV",
}
_SNAKE_OVERRIDES = {v: k for k, v in _CAMEL_OVERRIDES.items()}


def _camel(name: str) -> str:
    if name in _CAMEL_OVERRIDES:
        return _CAMEL_OVERRIDES[name]
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


def _snake(name: str) -> str:
    if name in _SNAKE_OVERRIDES:
        return _SNAKE_OVERRIDES[name]
    out: list[str] = []
    for ch in name:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def inputs_to_dict(inputs: StrategyInputs) -> dict[str, Any]:
    d = asdict(inputs)
    return {_camel(k): (list(v) if isinstance(v, tuple) else v) for k, v in d.items()}


def inputs_from_dict(strategy: Strategy | str, payload: dict[str, Any]) -> StrategyInputs:
    try:
        cls = _INPUT_TYPES[Strategy(strategy)]
    except ValueError:
        raise InvalidArgument(f"unknown strategy: {strategy}")

    known = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for k, v in payload.items():
        name = _snake(k)
        if name not in known:
            raise InvalidArgument(f"unknown {cls.__name__} field: {k}")
        kwargs[name] = tuple(float(x) for x in v) if name == "room_rents" else v
    return cls(**kwargs)


def scenario_to_json(s: Scenario) -> str:
    doc: dict[str, Any] = {
        "id": s.id,
        "name": s.name,
        "type": s.strategy.value,
        "inputs": inputs_to_dict(s.inputs),
        "createdAt": s.created_at.isoformat(),
    }
    if s.property_id is not None:
        doc["propertyId"] = s.property_id
    return json.dumps(doc)


def scenario_from_json(text: str) -> Scenario:
    try:
        doc = json.loads(text)
        strategy = Strategy(doc["type"])
        created_at = datetime.fromisoformat(doc["createdAt"])
        return Scenario(
            id=str(doc["id"]),
            name=str(doc.get("name") or ""),
            strategy=strategy,
            created_at=created_at,
            inputs=inputs_from_dict(strategy, doc.get("inputs") or {}),
            property_id=doc.get("propertyId"),
        )
    except InvalidArgument:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidArgument(f"malformed scenario: {e}") from e


# ----- What-if variations over a BTL base case -----


def diff_inputs(base: StrategyInputs, current: StrategyInputs) -> dict[str, Any]:
    """Fields of `current` that differ from `base`."""
    if type(base) is not type(current):
        raise InvalidArgument("cannot diff inputs of different strategies")
    return {
        f.name: getattr(current, f.name)
        for f in fields(base)
        if getattr(current, f.name) != getattr(base, f.name)
    }


def apply_changes(base: StrategyInputs, changes: dict[str, Any]) -> StrategyInputs:
    known = {f.name for f in fields(base)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise InvalidArgument(f"unknown {type(base).__name__} field(s): {', '.join(unknown)}")
    return replace(base, **changes)


@dataclass(frozen=True)
class ScenarioMetrics:
    monthly_cash_flow: float
    annual_cash_flow: float
    gross_yield: float
    net_yield: float
    roi: float
    total_cash_required: float
    monthly_mortgage: float
    break_even_rent: float


def compute_scenario_metrics(inputs: BTLInputs) -> ScenarioMetrics:
    r = compute_btl(inputs)

    fixed_costs = r.monthly_mortgage * 12 + inputs.insurance + inputs.service_charge + inputs.ground_rent
    # share of each pound of rent left after voids and percentage-based costs
    keep = (
        (1 - inputs.void_percent / 100.0)
        * (1 - inputs.letting_agent_fee / 100.0)
        * (1 - inputs.management_fee / 100.0)
        * (1 - inputs.maintenance_percent / 100.0)
    )
    break_even = fixed_costs / (12 * keep) if keep > 0 else 0.0

    return ScenarioMetrics(
        monthly_cash_flow=r.monthly_cash_flow,
        annual_cash_flow=r.annual_cash_flow,
        gross_yield=r.gross_yield,
        net_yield=r.net_yield,
        roi=r.roi,
        total_cash_required=r.total_cash_required,
        monthly_mortgage=r.monthly_mortgage,
        break_even_rent=round_half_up(break_even),
    )


@dataclass(frozen=True)
class VariationComparison:
    changes: dict[str, Any]
    base: ScenarioMetrics
    variation: ScenarioMetrics
    deltas: dict[str, float]


def compare_variation(base: BTLInputs, changes: dict[str, Any]) -> VariationComparison:
    varied = apply_changes(base, changes)
    base_m = compute_scenario_metrics(base)
    var_m = compute_scenario_metrics(varied)  # type: ignore[arg-type]
    deltas = {f.name: getattr(var_m, f.name) - getattr(base_m, f.name) for f in fields(ScenarioMetrics)}
    return VariationComparison(changes=diff_inputs(base, varied), base=base_m, variation=var_m, deltas=deltas)


# ----- Interest-rate stress test -----

DEFAULT_RATE_INCREASES: tuple[float, ...] = (0.0, 1.0, 2.0, 3.0, 4.0)
CASH_FLOW_WARNING_BELOW = 100.0


class StressStatus(str, Enum):
    positive = "positive"
    warning = "warning"
    negative = "negative"


@dataclass(frozen=True)
class StressTestRow:
    rate: float
    monthly_payment: float
    monthly_cash_flow: float
    status: StressStatus


def run_stress_test(inputs: BTLInputs, rate_increases: Iterable[float] = DEFAULT_RATE_INCREASES) -> list[StressTestRow]:
    rows: list[StressTestRow] = []
    for inc in rate_increases:
        rate = inputs.mortgage_rate + float(inc)
        r = compute_btl(replace(inputs, mortgage_rate=rate))
        cf = r.monthly_cash_flow
        if cf < 0:
            status = StressStatus.negative
        elif cf < CASH_FLOW_WARNING_BELOW:
            status = StressStatus.warning
        else:
            status = StressStatus.positive
        rows.append(
            StressTestRow(
                rate=rate,
                monthly_payment=round_half_up(r.monthly_mortgage),
                monthly_cash_flow=round_half_up(cf),
                status=status,
            )
        )
    return rows


# ----- Monte Carlo simulation -----

DEFAULT_SIMULATION_ITERATIONS = 1000
DEFAULT_CASH_FLOW_THRESHOLDS: tuple[float, ...] = (0.0, 100.0, 200.0)
_MODE_BINS = 20


class Distribution(str, Enum):
    normal = "normal"
    uniform = "uniform"
    triangular = "triangular"


@dataclass(frozen=True)
class VariableRange:
    min: float
    max: float
    most_likely: float
    distribution: Distribution = Distribution.normal


@dataclass(frozen=True)
class SimulationRanges:
    mortgage_rate: VariableRange
    monthly_rent: VariableRange
    void_percent: VariableRange
    maintenance_percent: VariableRange


def default_ranges(inputs: BTLInputs) -> SimulationRanges:
    """Rate -2/+3 points (floor 2%), rent +/-15%, voids 2-15%, maintenance 5-15%."""
    return SimulationRanges(
        mortgage_rate=VariableRange(max(2.0, inputs.mortgage_rate - 2), inputs.mortgage_rate + 3, inputs.mortgage_rate),
        monthly_rent=VariableRange(inputs.monthly_rent * 0.85, inputs.monthly_rent * 1.15, inputs.monthly_rent),
        void_percent=VariableRange(2.0, 15.0, inputs.void_percent, Distribution.triangular),
        maintenance_percent=VariableRange(5.0, 15.0, inputs.maintenance_percent),
    )


def _sample(rng: random.Random, r: VariableRange) -> float:
    if r.max <= r.min:
        return r.min
    if r.distribution == Distribution.uniform:
        v = rng.uniform(r.min, r.max)
    elif r.distribution == Distribution.triangular:
        v = rng.triangular(r.min, r.max, min(max(r.most_likely, r.min), r.max))
    else:
        # ~99.7% of draws fall inside the range before clamping
        v = rng.gauss(r.most_likely, (r.max - r.min) / 6)
    return min(max(v, r.min), r.max)


@dataclass(frozen=True)
class SimulationIteration:
    mortgage_rate: float
    monthly_rent: float
    void_percent: float
    maintenance_percent: float
    monthly_cash_flow: float
    net_yield: float
    roi: float


@dataclass(frozen=True)
class MetricStats:
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


@dataclass(frozen=True)
class SimulationStats:
    monthly_cash_flow: MetricStats
    net_yield: MetricStats
    roi: MetricStats


@dataclass(frozen=True)
class SimulationResult:
    iterations: tuple[SimulationIteration, ...]
    stats: SimulationStats


def _percentile(sorted_values: Sequence[float], p: float) -> float:
    # linear interpolation between closest ranks
    idx = p / 100.0 * (len(sorted_values) - 1)
    lo, hi = math.floor(idx), math.ceil(idx)
    if lo == hi:
        return sorted_values[lo]
    w = idx - lo
    return sorted_values[lo] * (1 - w) + sorted_values[hi] * w


def _histogram_mode(values: Sequence[float], lo: float, hi: float) -> float:
    """Midpoint of the fullest of 20 equal-width bins."""
    if hi == lo:
        return lo
    width = (hi - lo) / _MODE_BINS
    counts = [0] * _MODE_BINS
    for v in values:
        counts[min(int((v - lo) // width), _MODE_BINS - 1)] += 1
    return lo + (counts.index(max(counts)) + 0.5) * width


def metric_stats(values: Sequence[float]) -> MetricStats:
    if not values:
        raise InvalidArgument("no values to summarise")
    s = sorted(values)
    return MetricStats(
        mean=statistics.fmean(s),
        median=statistics.median(s),
        mode=_histogram_mode(s, s[0], s[-1]),
        std_dev=statistics.pstdev(s),
        min=s[0],
        max=s[-1],
        percentile_10=_percentile(s, 10),
        percentile_25=_percentile(s, 25),
        percentile_75=_percentile(s, 75),
        percentile_90=_percentile(s, 90),
    )


def run_monte_carlo(
    inputs: BTLInputs,
    ranges: SimulationRanges | None = None,
    *,
    iterations: int = DEFAULT_SIMULATION_ITERATIONS,
    rng: random.Random | None = None,
) -> SimulationResult:
    """
    Re-run the BTL model with mortgage rate, rent, voids and maintenance drawn
    from their ranges. Pass a seeded `rng` for repeatable runs.
    """
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations <= 0:
        raise InvalidArgument(f"iterations must be a positive integer (got {iterations!r})")
    ranges = ranges or default_ranges(inputs)
    for name in ("mortgage_rate", "monthly_rent", "void_percent", "maintenance_percent"):
        bounds = getattr(ranges, name)
        if bounds.min > bounds.max:
            raise InvalidArgument(f"{name} range has min > max")
    rng = rng or random.Random()

    rows: list[SimulationIteration] = []
    for _ in range(iterations):
        drawn = replace(
            inputs,
            mortgage_rate=_sample(rng, ranges.mortgage_rate),
            monthly_rent=_sample(rng, ranges.monthly_rent),
            void_percent=_sample(rng, ranges.void_percent),
            maintenance_percent=_sample(rng, ranges.maintenance_percent),
        )
        r = compute_btl(drawn)
        rows.append(
            SimulationIteration(
                mortgage_rate=drawn.mortgage_rate,
                monthly_rent=drawn.monthly_rent,
                void_percent=drawn.void_percent,
                maintenance_percent=drawn.maintenance_percent,
                monthly_cash_flow=r.monthly_cash_flow,
                net_yield=r.net_yield,
                roi=r.roi,
            )
        )

    return SimulationResult(
        iterations=tuple(rows),
        stats=SimulationStats(
            monthly_cash_flow=metric_stats([x.monthly_cash_flow for x in rows]),
            net_yield=metric_stats([x.net_yield for x in rows]),
            roi=metric_stats([x.roi for x in rows]),
        ),
    )


def cash_flow_probabilities(
    cash_flows: Sequence[float],
    thresholds: Iterable[float] = DEFAULT_CASH_FLOW_THRESHOLDS,
) -> dict[float, float]:
    """Percentage of simulated months with cash flow at or above each threshold."""
    if not cash_flows:
        raise InvalidArgument("no cash flows to score")
    n = len(cash_flows)
    return {float(t): sum(1 for cf in cash_flows if cf >= t) / n * 100.0 for t in thresholds}
