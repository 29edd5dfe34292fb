# app/entrypoints/api/routers/calculators.py
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Path

from ....schemas import (
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
    SdltIn,
    SdltOut,
    StampDutyIn,
    StampDutyOut,
    Strategy,
)
from ....service_layer import calculations as calc

router = APIRouter(prefix="/calculators", tags=["calculators"])


@router.get("/defaults/{strategy}")
def defaults(strategy: Strategy = Path(...)) -> dict[str, Any]:
    return calc.defaults_for(strategy)


@router.post("/btl", response_model=BTLOut)
def btl(body: BTLIn) -> BTLOut:
    return calc.calculate_btl(body)


@router.post("/brr", response_model=BRROut)
def brr(body: BRRIn) -> BRROut:
    return calc.calculate_brr(body)


@router.post("/hmo", response_model=HMOOut)
def hmo(body: HMOIn) -> HMOOut:
    return calc.calculate_hmo(body)


@router.post("/flip", response_model=FlipOut)
def flip(body: FlipIn) -> FlipOut:
    return calc.calculate_flip(body)


@router.post("/stamp-duty", response_model=StampDutyOut)
def stamp_duty(body: StampDutyIn) -> StampDutyOut:
    return calc.stamp_duty(body)


@router.post("/sdlt", response_model=SdltOut)
def sdlt(body: SdltIn) -> SdltOut:
    return calc.sdlt(body)


@router.post("/mortgage-payment", response_model=MortgagePaymentOut)
def mortgage_payment(body: MortgagePaymentIn) -> MortgagePaymentOut:
    return calc.mortgage_payment(body)


@router.post("/cgt", response_model=CgtOut)
def cgt(body: CgtIn) -> CgtOut:
    return calc.cgt(body)
