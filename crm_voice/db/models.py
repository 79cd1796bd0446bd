"""
Document Models

Collection names and the shapes of documents this service writes.
Field names follow the camelCase used by the CRM front end.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field

from crm_voice.models.call import CallEvent

STAFF_COLLECTION = "staff"
LEADS_COLLECTION = "leads"
CALL_EVENTS_COLLECTION = "callEvents"
LEAD_CALLS_SUBCOLLECTION = "calls"


def lead_calls_collection(lead_id: str) -> str:
    return f"{LEADS_COLLECTION}/{lead_id}/{LEAD_CALLS_SUBCOLLECTION}"


class CallEventDB(BaseModel):
    """Stored form of a call event"""
    model_config = ConfigDict(populate_by_name=True)

    call_sid: str = Field(alias="callSid")
    kind: str
    status: Optional[str] = None
    parent_call_sid: Optional[str] = Field(default=None, alias="parentCallSid")
    from_number: Optional[str] = Field(default=None, alias="from")
    to_number: Optional[str] = Field(default=None, alias="to")
    direction: Optional[str] = None
    duration_seconds: Optional[int] = Field(default=None, alias="durationInSeconds")
    recording_url: Optional[str] = Field(default=None, alias="recordingUrl")
    recording_sid: Optional[str] = Field(default=None, alias="recordingSid")
    received_at: datetime = Field(alias="receivedAt")
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_event(cls, event: CallEvent) -> "CallEventDB":
        return cls(
            call_sid=event.call_sid,
            kind=event.kind.value,
            status=event.status,
            parent_call_sid=event.parent_call_sid,
            from_number=event.from_number,
            to_number=event.to_number,
            direction=event.direction,
            duration_seconds=event.duration_seconds,
            recording_url=event.recording_url,
            recording_sid=event.recording_sid,
            received_at=event.received_at,
            raw=event.raw
        )

    def document_id(self) -> str:
        """Key of the event: call SID plus receipt timestamp"""
        return f"{self.call_sid}_{self.received_at.strftime('%Y%m%dT%H%M%S%fZ')}"

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CallLogDB(BaseModel):
    """Call log entry appended under a lead after a recorded agent call"""
    model_config = ConfigDict(populate_by_name=True)

    lead_id: str = Field(alias="leadId")
    lead_name: Optional[str] = Field(default=None, alias="leadName")
    agent_id: str = Field(alias="agentId")
    call_sid: Optional[str] = Field(default=None, alias="callSid")
    start_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="startTime"
    )
    duration_seconds: int = Field(default=0, alias="durationInSeconds")
    status: str
    recording_url: str = Field(alias="recordingUrl")
    notes: str = "Call automatically logged from Twilio."

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
