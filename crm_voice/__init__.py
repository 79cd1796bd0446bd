"""Dealership CRM voice service: Twilio webhooks, call routing and call event logging"""

__version__ = "1.0.0"
