"""Services for the CRM voice service"""

from .telephony.twilio_service import TwilioService
from .telephony.twiml import TwimlBuilder
from .agent_directory import AgentDirectory
from .call_router import CallRoutingEngine
from .call_event_recorder import CallEventRecorder

__all__ = [
    "TwilioService",
    "TwimlBuilder",
    "AgentDirectory",
    "CallRoutingEngine",
    "CallEventRecorder"
]
