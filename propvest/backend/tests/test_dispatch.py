# tests/test_dispatch.py
import pytest

from app.domain.calculators import calculate, default_inputs
from app.domain.policies import InvalidArgument
from app.domain.types import BRRResult, BTLInputs, BTLResult, FlipResult, HMOResult, Strategy


@pytest.mark.parametrize(
    "strategy,result_type",
    [
        (Strategy.btl, BTLResult),
        (Strategy.brr, BRRResult),
        (Strategy.hmo, HMOResult),
        (Strategy.flip, FlipResult),
    ],
)
def test_calculate_dispatches_on_strategy(strategy, result_type):
    inputs = default_inputs(strategy)
    assert type(inputs).strategy == strategy
    assert isinstance(calculate(inputs), result_type)


def test_default_inputs_accepts_plain_strings():
    assert default_inputs("btl") == BTLInputs()
    with pytest.raises(InvalidArgument):
        default_inputs("commercial")


def test_calculate_rejects_unknown_inputs():
    with pytest.raises(InvalidArgument):
        calculate(object())
