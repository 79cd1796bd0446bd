"""API Middleware"""

from .auth import get_current_staff

from .webhook_security import (
    TwilioWebhookValidator,
    TwilioWebhookRequest,
    callback_url,
    validate_twilio_webhook
)

__all__ = [
    # Auth
    "get_current_staff",
    # Webhook security
    "TwilioWebhookValidator",
    "TwilioWebhookRequest",
    "callback_url",
    "validate_twilio_webhook"
]
