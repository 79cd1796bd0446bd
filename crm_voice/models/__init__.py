"""Data models for the CRM voice service"""

from .call import (
    CallStatus,
    CallDirection,
    CallEventKind,
    TwilioCallParams,
    CallEvent,
    OutboundCallRequest,
    OutboundCallResponse,
    VoiceTokenResponse,
    is_e164
)

from .agent import Agent, EligibilityRule, StaffRole

from .routing import (
    MenuOption,
    RejectInvalid,
    PlayIvrMenu,
    DialAgent,
    DialNumber,
    DialClient,
    NoAgentsAvailable,
    SayAndHangup,
    RoutingDecision
)

__all__ = [
    # Call models
    "CallStatus",
    "CallDirection",
    "CallEventKind",
    "TwilioCallParams",
    "CallEvent",
    "OutboundCallRequest",
    "OutboundCallResponse",
    "VoiceTokenResponse",
    "is_e164",
    # Agent models
    "Agent",
    "EligibilityRule",
    "StaffRole",
    # Routing decisions
    "MenuOption",
    "RejectInvalid",
    "PlayIvrMenu",
    "DialAgent",
    "DialNumber",
    "DialClient",
    "NoAgentsAvailable",
    "SayAndHangup",
    "RoutingDecision"
]
