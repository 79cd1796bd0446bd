"""
TwiML Markup Builder
Renders routing decisions as Twilio call-control documents
"""

from typing import Optional

from twilio.twiml.voice_response import Dial, VoiceResponse

from crm_voice.core.config import Settings, settings
from crm_voice.models.routing import (
    DialAgent,
    DialClient,
    DialNumber,
    NoAgentsAvailable,
    PlayIvrMenu,
    RejectInvalid,
    RoutingDecision,
    SayAndHangup,
)

TWIML_MEDIA_TYPE = "text/xml"

LEG_STATUS_EVENTS = "initiated ringing answered completed"
NUMBER_RECORDING = "record-from-answer"
AGENT_RECORDING = "record-from-answer-dual"


class TwimlBuilder:
    """Builds one <Response> document per routing decision"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    def render(self, decision: RoutingDecision) -> str:
        """
        Render a routing decision

        Args:
            decision: Decision produced by the routing engine

        Returns:
            TwiML string with a single <Response> root
        """
        if isinstance(decision, (RejectInvalid, NoAgentsAvailable, SayAndHangup)):
            return self.say_and_hangup(decision.message)
        if isinstance(decision, PlayIvrMenu):
            return self.ivr_menu(decision)
        if isinstance(decision, DialNumber):
            return self.dial_number(decision)
        if isinstance(decision, (DialAgent, DialClient)):
            return self.dial_client(decision)
        raise TypeError(f"Unsupported routing decision: {type(decision).__name__}")

    def say_and_hangup(self, message: str) -> str:
        response = VoiceResponse()
        self._say(response, message)
        response.hangup()
        return str(response)

    def ivr_menu(self, menu: PlayIvrMenu) -> str:
        response = VoiceResponse()

        if menu.preface:
            self._say(response, menu.preface)
        elif menu.attempt == 1:
            self._say(response, f"Thank you for calling {self.config.business_name}.")

        gather = response.gather(
            input=self.config.ivr_input,
            num_digits=1,
            timeout=self.config.ivr_gather_timeout,
            action=self.config.webhook_url(f"gather?attempt={menu.attempt}"),
            method="POST",
        )
        self._say(gather, " ".join(option.prompt for option in menu.options))

        # Reached only when the caller pressed nothing
        if menu.is_last_attempt:
            self._say(response, "We did not receive your selection. Goodbye.")
            response.hangup()
        else:
            self._say(response, "We did not receive your selection.")
            response.redirect(
                self.config.webhook_url(f"voice?attempt={menu.attempt + 1}"),
                method="POST",
            )

        return str(response)

    def dial_number(self, decision: DialNumber) -> str:
        response = VoiceResponse()
        dial = self._dial(decision.caller_id, NUMBER_RECORDING)
        dial.number(
            decision.number,
            status_callback=self.config.webhook_url("status"),
            status_callback_event=LEG_STATUS_EVENTS,
            status_callback_method="POST",
        )
        response.append(dial)
        return str(response)

    def dial_client(self, decision) -> str:
        """Dial a softphone client (an agent picked by the directory or a fixed identity)"""
        identity = decision.agent_id if isinstance(decision, DialAgent) else decision.identity

        response = VoiceResponse()
        if decision.announcement:
            self._say(response, decision.announcement)

        dial = self._dial(decision.caller_id, AGENT_RECORDING, answer_on_bridge=True)
        dial.client(
            identity,
            status_callback=self.config.webhook_url("status"),
            status_callback_event=LEG_STATUS_EVENTS,
            status_callback_method="POST",
        )
        response.append(dial)
        return str(response)

    def _dial(self, caller_id: Optional[str], record: str, answer_on_bridge: bool = False) -> Dial:
        kwargs = {
            "record": record,
            "action": self.config.webhook_url("after-call"),
            "method": "POST",
        }
        if caller_id:
            kwargs["caller_id"] = caller_id
        if answer_on_bridge:
            kwargs["answer_on_bridge"] = True
        return Dial(**kwargs)

    def _say(self, verb, message: str) -> None:
        verb.say(message, voice=self.config.voice_name, language=self.config.voice_language)
