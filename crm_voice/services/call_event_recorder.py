"""
Call Event Recorder
Persists call lifecycle callbacks as an append-only log
"""

from typing import Dict, Optional

from crm_voice.core.config import Settings, settings
from crm_voice.core.exceptions import DocumentStoreError
from crm_voice.core.logging import get_logger
from crm_voice.db.models import CallLogDB
from crm_voice.db.repository import CallEventRepository, LeadRepository
from crm_voice.models.call import CallEvent, CallEventKind, CallStatus, TwilioCallParams

logger = get_logger(__name__)


class CallEventRecorder:
    """
    Records status and after-call callbacks.

    Recording never fails from the provider's point of view: store errors
    are logged and swallowed so Twilio does not redeliver the callback.
    Redelivered callbacks are stored again; nothing is deduplicated.
    """

    def __init__(
        self,
        events: CallEventRepository,
        leads: LeadRepository,
        config: Optional[Settings] = None
    ):
        self.events = events
        self.leads = leads
        self.config = config or settings

    async def record_status(self, params: TwilioCallParams, raw: Dict[str, str]) -> bool:
        """
        Append one event for a status callback

        Returns:
            True if the event was stored, False if the store failed
        """
        event = CallEvent.from_params(params, CallEventKind.STATUS, raw=raw)
        logger.info(f"Call {event.call_sid} status: {event.status}")
        return await self._append(event)

    async def record_after_call(self, params: TwilioCallParams, raw: Dict[str, str]) -> bool:
        """
        Append one event for a completed dial and log the call on its lead

        Returns:
            True if the event was stored, False if the store failed
        """
        event = CallEvent.from_params(params, CallEventKind.AFTER_CALL, raw=raw)
        logger.info(
            f"Call {event.call_sid} finished: {event.status}, "
            f"{event.duration_seconds or 0}s, recording={bool(event.recording_url)}"
        )
        stored = await self._append(event)
        await self._log_lead_call(params, event)
        return stored

    async def _append(self, event: CallEvent) -> bool:
        try:
            await self.events.append(event)
            return True
        except DocumentStoreError as e:
            logger.error(f"Failed to record event for call {event.call_sid}: {e.message}", exc_info=True)
            return False

    def _lead_and_agent(self, params: TwilioCallParams):
        """
        Work out which side of the call was the lead and which the agent

        Agent-originated calls come from ``client:<agent>`` and dial the
        lead; inbound calls come from the lead and were dialed to
        ``client:<agent>``.
        """
        prefix = self.config.client_identity_prefix
        if params.from_ and params.from_.startswith(prefix):
            return params.to, params.from_[len(prefix):]
        if params.dial_call_to and params.dial_call_to.startswith(prefix):
            return params.from_, params.dial_call_to[len(prefix):]
        return None, None

    async def _log_lead_call(self, params: TwilioCallParams, event: CallEvent) -> None:
        lead_phone, agent_id = self._lead_and_agent(params)

        if not (lead_phone and agent_id and event.recording_url
                and event.status == CallStatus.COMPLETED.value):
            logger.debug(
                f"Call {event.call_sid} not logged on a lead "
                f"(lead={lead_phone}, agent={agent_id}, status={event.status})"
            )
            return

        try:
            lead = await self.leads.find_by_phone(lead_phone)
            if lead is None:
                logger.info(f"No lead found for phone number: {lead_phone}")
                return

            await self.leads.append_call_log(CallLogDB(
                lead_id=lead.id,
                lead_name=lead.data.get("name"),
                agent_id=agent_id,
                call_sid=event.call_sid,
                duration_seconds=event.duration_seconds or 0,
                status=event.status,
                recording_url=event.recording_url,
            ))
            logger.info(f"Call {event.call_sid} logged for lead {lead.id}")
        except DocumentStoreError as e:
            logger.error(f"Failed to log call {event.call_sid} on lead: {e.message}", exc_info=True)
