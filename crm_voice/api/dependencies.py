"""
Request-scoped dependencies

Long-lived resources (document store, Twilio client, random generator)
are created once in the application lifespan and kept on ``app.state``;
these helpers assemble the per-request services around them.
"""

from fastapi import Request

from crm_voice.core.config import settings
from crm_voice.db.base import DocumentStore
from crm_voice.db.repository import CallEventRepository, LeadRepository, StaffRepository
from crm_voice.services.agent_directory import AgentDirectory
from crm_voice.services.call_event_recorder import CallEventRecorder
from crm_voice.services.call_router import CallRoutingEngine
from crm_voice.services.telephony.twilio_service import TwilioService
from crm_voice.services.telephony.twiml import TwimlBuilder


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_twilio_service(request: Request) -> TwilioService:
    return request.app.state.twilio_service


def get_routing_engine(request: Request) -> CallRoutingEngine:
    directory = AgentDirectory(
        StaffRepository(get_document_store(request)),
        rng=request.app.state.agent_rng
    )
    return CallRoutingEngine(directory, settings)


def get_event_recorder(request: Request) -> CallEventRecorder:
    store = get_document_store(request)
    return CallEventRecorder(CallEventRepository(store), LeadRepository(store), settings)


def get_twiml_builder() -> TwimlBuilder:
    return TwimlBuilder(settings)
