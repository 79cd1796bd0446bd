"""
Click-to-call API routes
"""

from fastapi import APIRouter, Depends

from crm_voice.api.dependencies import get_twilio_service
from crm_voice.api.middleware.auth import get_current_staff
from crm_voice.core.exceptions import CallInitiationError, InvalidPhoneNumberError
from crm_voice.core.logging import get_logger
from crm_voice.models.agent import Agent
from crm_voice.models.call import OutboundCallRequest, OutboundCallResponse, is_e164
from crm_voice.services.telephony.twilio_service import TwilioService

logger = get_logger(__name__)

router = APIRouter(prefix="/calls", tags=["calls"])


@router.post("/outbound", response_model=OutboundCallResponse)
async def initiate_outbound_call(
    request: OutboundCallRequest,
    staff: Agent = Depends(get_current_staff),
    twilio_service: TwilioService = Depends(get_twilio_service)
):
    """
    Call a customer and connect the requesting staff member

    - **to**: Customer phone number (E.164 format, e.g., +14155551234)
    - **metadata**: Optional lead or campaign references, logged only
    """
    logger.info(f"Click-to-call by {staff.id} to {request.to} {request.metadata or ''}")

    if not is_e164(request.to):
        raise InvalidPhoneNumberError(request.to)

    result = await twilio_service.initiate_call(request.to.strip(), agent_id=staff.id)
    if not result.get("success"):
        raise CallInitiationError(result.get("error", "Failed to create outbound call"), request.to)

    return OutboundCallResponse(call_sid=result["call_sid"], status=result.get("status"))
