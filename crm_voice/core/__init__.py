"""Core module for configuration, settings, and shared utilities"""

from .config import settings, get_settings, Settings
from .logging import setup_logging, get_logger
from .exceptions import (
    CrmVoiceException,
    AuthenticationError,
    StaffNotFoundError,
    WebhookError,
    WebhookValidationError,
    CallError,
    InvalidPhoneNumberError,
    CallInitiationError,
    ServiceError,
    VoiceTokenError,
    DocumentStoreError
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    "Settings",
    # Logging
    "setup_logging",
    "get_logger",
    # Exceptions
    "CrmVoiceException",
    "AuthenticationError",
    "StaffNotFoundError",
    "WebhookError",
    "WebhookValidationError",
    "CallError",
    "InvalidPhoneNumberError",
    "CallInitiationError",
    "ServiceError",
    "VoiceTokenError",
    "DocumentStoreError"
]
