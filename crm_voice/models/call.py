"""
Data models for call webhooks and call events
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field

E164_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")


def is_e164(number: Optional[str]) -> bool:
    """True when the value is a '+'-prefixed E.164 phone number"""
    return bool(number) and bool(E164_PATTERN.match(number.strip()))


class CallStatus(str, Enum):
    """Call status values reported by Twilio"""
    QUEUED = "queued"
    INITIATED = "initiated"
    RINGING = "ringing"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BUSY = "busy"
    NO_ANSWER = "no-answer"
    FAILED = "failed"
    CANCELED = "canceled"


class CallDirection(str, Enum):
    """Direction of a call leg"""
    INBOUND = "inbound"
    OUTBOUND_API = "outbound-api"
    OUTBOUND_DIAL = "outbound-dial"


class CallEventKind(str, Enum):
    """Which webhook produced a call event"""
    STATUS = "status"
    AFTER_CALL = "after-call"


class TwilioCallParams(BaseModel):
    """
    Call parameters posted by Twilio to a voice webhook

    A call is never stored as a row of its own; it is rebuilt from the
    form parameters of each webhook.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    call_sid: Optional[str] = Field(default=None, alias="CallSid")
    parent_call_sid: Optional[str] = Field(default=None, alias="ParentCallSid")
    from_: Optional[str] = Field(default=None, alias="From")
    to: Optional[str] = Field(default=None, alias="To")
    direction: Optional[str] = Field(default=None, alias="Direction")
    call_status: Optional[str] = Field(default=None, alias="CallStatus")
    call_duration: Optional[int] = Field(default=None, alias="CallDuration")
    digits: Optional[str] = Field(default=None, alias="Digits")
    recording_url: Optional[str] = Field(default=None, alias="RecordingUrl")
    recording_sid: Optional[str] = Field(default=None, alias="RecordingSid")
    dial_call_to: Optional[str] = Field(default=None, alias="DialCallTo")
    dial_call_status: Optional[str] = Field(default=None, alias="DialCallStatus")
    dial_call_duration: Optional[int] = Field(default=None, alias="DialCallDuration")

    @classmethod
    def from_form(cls, params: Dict[str, str]) -> "TwilioCallParams":
        """Build from form parameters, treating blank values as absent"""
        cleaned = {key: value for key, value in params.items() if value not in ("", None)}
        for key in ("CallDuration", "DialCallDuration"):
            if key in cleaned and not str(cleaned[key]).isdigit():
                cleaned.pop(key)
        return cls.model_validate(cleaned)


class CallEvent(BaseModel):
    """
    One received status or after-call callback

    Written once by the call event recorder and never updated.
    """
    call_sid: str
    kind: CallEventKind = CallEventKind.STATUS
    status: Optional[str] = None
    parent_call_sid: Optional[str] = None
    from_number: Optional[str] = None
    to_number: Optional[str] = None
    direction: Optional[str] = None
    duration_seconds: Optional[int] = None
    recording_url: Optional[str] = None
    recording_sid: Optional[str] = None
    received_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_params(
        cls,
        params: TwilioCallParams,
        kind: CallEventKind,
        raw: Optional[Dict[str, Any]] = None
    ) -> "CallEvent":
        if kind == CallEventKind.AFTER_CALL:
            status = params.dial_call_status or params.call_status
            duration = params.dial_call_duration if params.dial_call_duration is not None else params.call_duration
        else:
            status = params.call_status
            duration = params.call_duration

        return cls(
            call_sid=params.call_sid or "unknown",
            kind=kind,
            status=status,
            parent_call_sid=params.parent_call_sid,
            from_number=params.from_,
            to_number=params.to,
            direction=params.direction,
            duration_seconds=duration,
            recording_url=params.recording_url,
            recording_sid=params.recording_sid,
            raw=raw or {}
        )


class OutboundCallRequest(BaseModel):
    """Click-to-call request from a staff member"""
    model_config = {
        "json_schema_extra": {
            "example": {
                "to": "+14155551234",
                "metadata": {"lead_id": "lead-123"}
            }
        }
    }

    to: str = Field(..., description="Customer phone number (E.164 format)")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class OutboundCallResponse(BaseModel):
    """Result of a click-to-call request"""
    success: bool = True
    call_sid: str
    status: Optional[str] = None


class VoiceTokenResponse(BaseModel):
    """Softphone access token issued to a staff member"""
    identity: str
    token: str
    ttl: int
