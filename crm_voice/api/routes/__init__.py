"""API Routes"""

from . import calls, health, voice, webhooks

__all__ = ["calls", "health", "voice", "webhooks"]
