# tests/conftest.py
import httpx
import pytest

from app.domain.types import BRRInputs, BTLInputs, FlipInputs, HMOInputs
from app.entrypoints.fastapi_app import create_app


@pytest.fixture
def btl_inputs() -> BTLInputs:
    """The standard BTL example: £250k, 25% deposit, 5.5% over 25 years, £1,200/month."""
    return BTLInputs(
        purchase_price=250000,
        deposit_percent=25,
        mortgage_rate=5.5,
        mortgage_term=25,
        monthly_rent=1200,
        void_percent=5,
        letting_agent_fee=8,
        management_fee=10,
        maintenance_percent=10,
        insurance=300,
        legal_fees=1500,
        survey_fees=500,
        broker_fees=500,
        refurb_costs=0,
        service_charge=0,
        ground_rent=0,
    )


@pytest.fixture
def brr_inputs() -> BRRInputs:
    return BRRInputs()


@pytest.fixture
def hmo_inputs() -> HMOInputs:
    return HMOInputs()


@pytest.fixture
def flip_inputs() -> FlipInputs:
    return FlipInputs()


@pytest.fixture
def app():
    return create_app()


@pytest.fixture
async def client(app):
    """
    In-process client. ASGITransport talks to the app directly, no server needed.
    """
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
