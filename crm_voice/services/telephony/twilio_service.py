"""
Twilio Telephony Service
Click-to-call through the Twilio REST API and softphone access tokens
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from urllib.parse import quote
from twilio.rest import Client
from twilio.base.exceptions import TwilioRestException
from twilio.jwt.access_token import AccessToken
from twilio.jwt.access_token.grants import VoiceGrant

from crm_voice.core.config import Settings, settings
from crm_voice.core.exceptions import VoiceTokenError
from crm_voice.core.logging import get_logger

logger = get_logger(__name__)

STATUS_CALLBACK_EVENTS = ["initiated", "ringing", "answered", "completed"]


class TwilioService:
    """Service for interacting with Twilio API"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.account_sid = self.config.twilio_account_sid
        self.auth_token = self.config.twilio_auth_token
        self.phone_number = self.config.twilio_phone_number

        self.client = Client(self.account_sid, self.auth_token)

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.phone_number)

    async def initiate_call(
        self,
        to_number: str,
        agent_id: str,
        record: bool = True,
        timeout: int = 30
    ) -> Dict[str, Any]:
        """
        Place a click-to-call: ring the customer, then bridge the agent

        Args:
            to_number: Customer phone number (E.164 format)
            agent_id: Staff id whose softphone is connected once the customer answers
            record: Whether to record the call
            timeout: Ring timeout in seconds

        Returns:
            Call information including SID
        """
        logger.info(f"Agent {agent_id} initiating call to {to_number}")

        try:
            call = self.client.calls.create(
                to=to_number,
                from_=self.phone_number,
                url=self.config.webhook_url(f"voice?agent={quote(agent_id, safe='')}"),
                method="POST",
                status_callback=self.config.webhook_url("status"),
                status_callback_method="POST",
                status_callback_event=STATUS_CALLBACK_EVENTS,
                record=record,
                timeout=timeout
            )

            logger.info(f"Call initiated successfully: {call.sid}")
            return {
                "success": True,
                "call_sid": call.sid,
                "status": call.status,
                "created_at": datetime.now(timezone.utc).isoformat()
            }

        except TwilioRestException as e:
            logger.error(f"Twilio API error: {e.code} - {e.msg}")
            return {
                "success": False,
                "error": f"Twilio error: {e.msg}",
                "code": e.code
            }

    def create_voice_token(self, identity: str, ttl: Optional[int] = None) -> str:
        """
        Issue a softphone access token

        Args:
            identity: Client identity, the staff member's id
            ttl: Lifetime in seconds (defaults to settings.voice_token_ttl_seconds)

        Returns:
            Signed JWT carrying a voice grant for outgoing and incoming calls
        """
        api_key = self.config.twilio_api_key
        api_secret = self.config.twilio_api_secret
        app_sid = self.config.twiml_app_sid

        if not (self.account_sid and api_key and api_secret and app_sid):
            logger.error("Cannot issue voice token: Twilio API key, secret or TwiML app SID missing")
            raise VoiceTokenError()

        token = AccessToken(
            self.account_sid,
            api_key,
            api_secret,
            identity=identity,
            ttl=ttl or self.config.voice_token_ttl_seconds
        )
        token.add_grant(VoiceGrant(
            outgoing_application_sid=app_sid,
            incoming_allow=True
        ))

        jwt_token = token.to_jwt()
        if isinstance(jwt_token, bytes):
            jwt_token = jwt_token.decode("utf-8")
        return jwt_token
