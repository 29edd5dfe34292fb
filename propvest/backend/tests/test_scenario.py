# tests/test_scenario.py
import json
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from app.domain.calculators import compute_btl
from app.domain.policies import InvalidArgument
from app.domain.scenario import (
    StressStatus,
    apply_changes,
    compare_variation,
    compute_scenario_metrics,
    diff_inputs,
    inputs_from_dict,
    inputs_to_dict,
    new_scenario,
    run_stress_test,
    scenario_from_json,
    scenario_to_json,
)
from app.domain.types import BRRInputs, HMOInputs, Strategy

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_scenario_json_uses_client_keys(brr_inputs):
    s = new_scenario("Terrace BRR", brr_inputs, property_id="prop-1", now=NOW)
    doc = json.loads(scenario_to_json(s))

    assert doc["type"] == "brr"
    assert doc["name"] == "Terrace BRR"
    assert doc["propertyId"] == "prop-1"
    assert doc["createdAt"] == NOW.isoformat()
    assert doc["inputs"]["estimatedARV"] == 220000
    assert doc["inputs"]["newMortgageLTV"] == 75
    assert doc["inputs"]["refurbTimeline"] == 3
    assert "estimated_arv" not in doc["inputs"]


def test_scenario_json_round_trip(hmo_inputs):
    s = new_scenario("Five bed HMO", replace(hmo_inputs, room_rents=(700.0, 650.0, 600.0)), now=NOW)
    back = scenario_from_json(scenario_to_json(s))

    assert back == s
    assert back.strategy == Strategy.hmo
    assert back.inputs.room_rents == (700.0, 650.0, 600.0)
    assert "propertyId" not in json.loads(scenario_to_json(s))


def test_new_scenario_ids_are_unique(btl_inputs):
    assert new_scenario("a", btl_inputs).id != new_scenario("a", btl_inputs).id


def test_inputs_dict_accepts_partial_payload():
    inputs = inputs_from_dict("hmo", {"purchasePrice": 250000, "roomRents": [500, 500]})
    assert inputs == HMOInputs(purchase_price=250000, room_rents=(500.0, 500.0))
    assert inputs_to_dict(inputs)["roomRents"] == [500.0, 500.0]


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        json.dumps({"id": "1", "type": "commercial", "createdAt": NOW.isoformat(), "inputs": {}}),
        json.dumps({"id": "1", "type": "btl", "inputs": {}}),
        json.dumps({"id": "1", "type": "btl", "createdAt": "yesterday", "inputs": {}}),
        json.dumps({"id": "1", "type": "btl", "createdAt": NOW.isoformat(), "inputs": {"bogusField": 1}}),
    ],
)
def test_malformed_scenario_rejected(text):
    with pytest.raises(InvalidArgument):
        scenario_from_json(text)


def test_diff_and_apply(btl_inputs):
    varied = replace(btl_inputs, monthly_rent=1400, mortgage_rate=6.0)
    changes = diff_inputs(btl_inputs, varied)

    assert changes == {"monthly_rent": 1400, "mortgage_rate": 6.0}
    assert apply_changes(btl_inputs, changes) == varied
    assert diff_inputs(btl_inputs, btl_inputs) == {}


def test_diff_and_apply_reject_bad_input(btl_inputs):
    with pytest.raises(InvalidArgument):
        diff_inputs(btl_inputs, BRRInputs())
    with pytest.raises(InvalidArgument):
        apply_changes(btl_inputs, {"monthly_rnet": 1400})


def test_scenario_metrics(btl_inputs):
    m = compute_scenario_metrics(btl_inputs)
    r = compute_btl(btl_inputs)

    assert m.monthly_cash_flow == r.monthly_cash_flow
    assert m.gross_yield == r.gross_yield
    assert m.total_cash_required == r.total_cash_required
    assert m.monthly_mortgage == r.monthly_mortgage

    keep = 0.95 * 0.92 * 0.90 * 0.90
    assert m.break_even_rent == round((r.monthly_mortgage * 12 + 300) / (12 * keep))


def test_break_even_rent_zero_when_nothing_kept(btl_inputs):
    m = compute_scenario_metrics(replace(btl_inputs, void_percent=100))
    assert m.break_even_rent == 0


def test_compare_variation(btl_inputs):
    cmp = compare_variation(btl_inputs, {"monthly_rent": 1500})

    assert cmp.changes == {"monthly_rent": 1500}
    assert cmp.base == compute_scenario_metrics(btl_inputs)
    assert cmp.deltas["monthly_mortgage"] == 0
    assert cmp.deltas["break_even_rent"] == 0
    assert cmp.deltas["monthly_cash_flow"] == pytest.approx(
        cmp.variation.monthly_cash_flow - cmp.base.monthly_cash_flow
    )
    assert cmp.deltas["monthly_cash_flow"] > 0


def test_compare_variation_no_op_change(btl_inputs):
    cmp = compare_variation(btl_inputs, {"monthly_rent": btl_inputs.monthly_rent})
    assert cmp.changes == {}
    assert all(d == 0 for d in cmp.deltas.values())


def test_stress_test_rows(btl_inputs):
    rows = run_stress_test(btl_inputs)

    assert [r.rate for r in rows] == [5.5, 6.5, 7.5, 8.5, 9.5]
    payments = [r.monthly_payment for r in rows]
    assert payments == sorted(payments)
    flows = [r.monthly_cash_flow for r in rows]
    assert flows == sorted(flows, reverse=True)
    assert all(float(r.monthly_payment).is_integer() for r in rows)


def test_stress_test_status_bands(btl_inputs):
    rich = run_stress_test(replace(btl_inputs, monthly_rent=3000), [0])[0]
    assert rich.status == StressStatus.positive

    # roughly £20/month after costs
    thin = run_stress_test(replace(btl_inputs, monthly_rent=1750), [0])[0]
    assert 0 <= thin.monthly_cash_flow < 100
    assert thin.status == StressStatus.warning

    # the standard example already loses money at 5.5%
    base = run_stress_test(btl_inputs, [0])[0]
    assert base.monthly_cash_flow < 0
    assert base.status == StressStatus.negative
