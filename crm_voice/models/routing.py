"""
Routing decisions produced by the call routing engine

A decision exists only while one webhook is being handled; it is turned
into TwiML by the markup builder and never persisted.
"""

from typing import List, Literal, Optional, Union
from pydantic import BaseModel


class MenuOption(BaseModel):
    """One touch-tone option of the IVR menu"""
    digit: str
    key: str
    prompt: str


class RejectInvalid(BaseModel):
    """Call cannot be placed: speak the reason and hang up"""
    kind: Literal["reject_invalid"] = "reject_invalid"
    message: str


class PlayIvrMenu(BaseModel):
    """Offer the touch-tone menu"""
    kind: Literal["play_ivr_menu"] = "play_ivr_menu"
    options: List[MenuOption]
    attempt: int = 1
    max_attempts: int = 3
    preface: Optional[str] = None

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt >= self.max_attempts


class DialAgent(BaseModel):
    """Connect the caller to a staff member's softphone"""
    kind: Literal["dial_agent"] = "dial_agent"
    agent_id: str
    caller_id: Optional[str] = None
    announcement: Optional[str] = None


class DialNumber(BaseModel):
    """Connect an agent-originated leg to an external phone number"""
    kind: Literal["dial_number"] = "dial_number"
    number: str
    caller_id: str


class DialClient(BaseModel):
    """Connect the call to a specific softphone client identity"""
    kind: Literal["dial_client"] = "dial_client"
    identity: str
    caller_id: Optional[str] = None
    announcement: Optional[str] = None


class NoAgentsAvailable(BaseModel):
    """No eligible agent: apologise and hang up"""
    kind: Literal["no_agents_available"] = "no_agents_available"
    message: str


class SayAndHangup(BaseModel):
    """Speak a message and end the call"""
    kind: Literal["say_and_hangup"] = "say_and_hangup"
    message: str


RoutingDecision = Union[
    RejectInvalid,
    PlayIvrMenu,
    DialAgent,
    DialNumber,
    DialClient,
    NoAgentsAvailable,
    SayAndHangup,
]

