"""
Pytest configuration and fixtures
"""

import os
import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("TWILIO_ACCOUNT_SID", "ACtestaccountsid")
os.environ.setdefault("TWILIO_AUTH_TOKEN", "test-auth-token")
os.environ.setdefault("TWILIO_PHONE_NUMBER", "+15551234567")
os.environ.setdefault("TWILIO_API_KEY", "SKtestapikey")
os.environ.setdefault("TWILIO_API_SECRET", "test-api-secret")
os.environ.setdefault("TWIML_APP_SID", "APtestappsid")
os.environ.setdefault("PUBLIC_BASE_URL", "https://crm.example.com")
os.environ.setdefault("DOCUMENT_STORE_BACKEND", "memory")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AGENT_SELECTION_SEED", "7")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

from fastapi.testclient import TestClient

from crm_voice.core.config import settings
from crm_voice.db.adapters.memory import InMemoryDocumentStore
from crm_voice.db.models import LEADS_COLLECTION, STAFF_COLLECTION

STAFF = {
    "agent42": {
        "name": "Dana Broker",
        "email": "dana@gsautobrokers.com",
        "role": "Broker",
        "canReceiveIncomingCalls": False,
    },
    "agent7": {
        "name": "Sam Support",
        "email": "sam@gsautobrokers.com",
        "role": "Sales Rep",
        "canReceiveIncomingCalls": True,
    },
    "agent9": {
        "name": "Lee Trainee",
        "email": "lee@gsautobrokers.com",
        "role": "Sales Rep",
        "canReceiveIncomingCalls": False,
    },
}

LEADS = {
    "lead-1": {"name": "Jordan Customer", "phone": "+14155550100"},
}


@pytest.fixture
def staff_records():
    return {staff_id: dict(data) for staff_id, data in STAFF.items()}


@pytest.fixture
def document_store(staff_records):
    """In-memory store seeded with staff and leads"""
    return InMemoryDocumentStore(seed={
        STAFF_COLLECTION: staff_records,
        LEADS_COLLECTION: {lead_id: dict(data) for lead_id, data in LEADS.items()},
    })


@pytest.fixture
def test_client(document_store):
    """Fixture for test client backed by the seeded store"""
    from crm_voice.main import app
    with TestClient(app) as client:
        client.portal.call(document_store.connect)
        app.state.document_store = document_store
        yield client


@pytest.fixture
def sign_webhook():
    """Return a function computing the Twilio signature for a webhook path"""
    from crm_voice.api.middleware.webhook_security import TwilioWebhookValidator

    def _sign(path, params):
        return TwilioWebhookValidator().compute_signature(
            settings.webhook_url(path), list(params.items())
        )
    return _sign


@pytest.fixture
def post_webhook(test_client, sign_webhook):
    """
    Post form parameters to a Twilio webhook path like "gather?attempt=2"

    The request is signed unless a signature is given; pass "" to send
    no signature header at all.
    """
    from crm_voice.api.middleware.webhook_security import SIGNATURE_HEADER

    def _post(path, params, signature=None):
        if signature is None:
            signature = sign_webhook(path, params)
        headers = {SIGNATURE_HEADER: signature} if signature else {}
        return test_client.post(
            f"/api/v1/webhooks/twilio/{path}",
            data=params,
            headers=headers
        )
    return _post


@pytest.fixture
def ivr_mode(monkeypatch):
    """Route external callers to the touch-tone menu instead of an agent"""
    monkeypatch.setattr(settings, "inbound_routing_mode", "ivr")


@pytest.fixture
def staff_headers():
    """Bearer token headers for staff member agent42"""
    from crm_voice.core.jwt_auth import create_jwt_token
    return {"Authorization": f"Bearer {create_jwt_token('agent42')}"}


@pytest.fixture
def inbound_call_params():
    """Parameters of a customer calling the business number"""
    return {
        "CallSid": "CA1111111111111111111111111111111a",
        "From": "+14155550100",
        "To": "+15551234567",
        "Direction": "inbound",
        "CallStatus": "ringing",
    }
