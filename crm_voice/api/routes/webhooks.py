"""
Webhook routes for Twilio voice callbacks

Call-control endpoints (voice, gather) answer with TwiML only; event
endpoints (status, after-call) answer with a JSON acknowledgement only.
Every endpoint verifies the Twilio signature before doing anything else.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from crm_voice.api.dependencies import get_event_recorder, get_routing_engine, get_twiml_builder
from crm_voice.api.middleware.webhook_security import TwilioWebhookRequest, validate_twilio_webhook
from crm_voice.core.logging import get_logger
from crm_voice.services.call_event_recorder import CallEventRecorder
from crm_voice.services.call_router import UPSTREAM_FAILURE_MESSAGE, CallRoutingEngine
from crm_voice.services.telephony.twiml import TWIML_MEDIA_TYPE, TwimlBuilder

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks/twilio", tags=["webhooks"])

ACKNOWLEDGEMENT = {"received": True}


def twiml_response(content: str) -> Response:
    return Response(content=content, media_type=TWIML_MEDIA_TYPE)


@router.post("/voice")
async def handle_incoming_call(
    attempt: int = 1,
    agent: Optional[str] = None,
    webhook: TwilioWebhookRequest = Depends(validate_twilio_webhook),
    engine: CallRoutingEngine = Depends(get_routing_engine),
    builder: TwimlBuilder = Depends(get_twiml_builder)
):
    """
    Handle a new call leg

    Called when someone dials the business number, when an agent places a
    call from the softphone, when a click-to-call leg is answered, and
    when the IVR menu redirects after no input.
    """
    call = webhook.call
    logger.info(
        f"Voice webhook: {call.call_sid} from {call.from_} to {call.to} "
        f"({call.direction}), attempt {attempt}"
    )

    try:
        decision = await engine.route_call(call, attempt=attempt, bridge_agent=agent)
        return twiml_response(builder.render(decision))
    except Exception as e:
        logger.error(f"Error routing call {call.call_sid}: {e}", exc_info=True)
        return twiml_response(builder.say_and_hangup(UPSTREAM_FAILURE_MESSAGE))


@router.post("/gather")
async def handle_gather(
    attempt: int = 1,
    webhook: TwilioWebhookRequest = Depends(validate_twilio_webhook),
    engine: CallRoutingEngine = Depends(get_routing_engine),
    builder: TwimlBuilder = Depends(get_twiml_builder)
):
    """
    Handle the digit pressed in the IVR menu
    """
    call = webhook.call
    logger.info(f"Gather input for {call.call_sid}: {call.digits!r} (attempt {attempt})")

    try:
        decision = await engine.route_gather(call, attempt=attempt)
        return twiml_response(builder.render(decision))
    except Exception as e:
        logger.error(f"Error handling gather for {call.call_sid}: {e}", exc_info=True)
        return twiml_response(builder.say_and_hangup(UPSTREAM_FAILURE_MESSAGE))


@router.post("/status")
async def handle_call_status(
    webhook: TwilioWebhookRequest = Depends(validate_twilio_webhook),
    recorder: CallEventRecorder = Depends(get_event_recorder)
):
    """
    Handle call status updates from Twilio

    Always acknowledged, even when the event could not be stored.
    """
    try:
        await recorder.record_status(webhook.call, webhook.params)
    except Exception as e:
        logger.error(f"Error recording status callback: {e}", exc_info=True)
    return ACKNOWLEDGEMENT


@router.post("/after-call")
async def handle_after_call(
    webhook: TwilioWebhookRequest = Depends(validate_twilio_webhook),
    recorder: CallEventRecorder = Depends(get_event_recorder)
):
    """
    Handle the end of a dialed leg (the <Dial> action callback)
    """
    try:
        await recorder.record_after_call(webhook.call, webhook.params)
    except Exception as e:
        logger.error(f"Error recording after-call callback: {e}", exc_info=True)
    return ACKNOWLEDGEMENT
