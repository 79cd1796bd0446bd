"""
Call Routing Engine
Decides what happens to a call leg from the parameters of a voice webhook
"""

from dataclasses import dataclass
from typing import List, Optional

from crm_voice.core.config import Settings, settings
from crm_voice.core.exceptions import DocumentStoreError
from crm_voice.core.logging import get_logger
from crm_voice.models.agent import EligibilityRule
from crm_voice.models.call import CallDirection, TwilioCallParams, is_e164
from crm_voice.models.routing import (
    DialAgent,
    DialClient,
    DialNumber,
    MenuOption,
    NoAgentsAvailable,
    PlayIvrMenu,
    RejectInvalid,
    RoutingDecision,
    SayAndHangup,
)
from crm_voice.services.agent_directory import AgentDirectory

logger = get_logger(__name__)

MISSING_CALLER_MESSAGE = "We could not identify this call. Goodbye."
INVALID_DESTINATION_MESSAGE = (
    "We could not process your call, the destination number is missing or invalid."
)
NO_AGENTS_MESSAGE = (
    "We are sorry, but all of our agents are currently busy. Please call back later."
)
UPSTREAM_FAILURE_MESSAGE = (
    "We encountered an error connecting your call. Please try again later. Goodbye."
)
INVALID_OPTION_MESSAGE = "That is not a valid option."
MENU_EXHAUSTED_MESSAGE = (
    "We did not receive a valid selection. Please call back and try again. Goodbye."
)


@dataclass(frozen=True)
class Department:
    """An IVR destination reachable by one digit"""
    digit: str
    key: str
    label: str
    rule: Optional[EligibilityRule] = None
    info_message: Optional[str] = None

    @property
    def prompt(self) -> str:
        return f"For {self.label}, press {self.digit}."


def build_departments(config: Settings) -> List[Department]:
    """IVR menu entries in the order they are announced"""
    return [
        Department(
            digit="1",
            key="sales",
            label="sales",
            rule=EligibilityRule.for_roles(config.sales_roles),
        ),
        Department(
            digit="2",
            key="support",
            label="support",
            rule=EligibilityRule.incoming_flag(),
        ),
        Department(
            digit="3",
            key="info",
            label="our business hours",
            info_message=f"{config.business_hours_message} Thank you for calling {config.business_name}. Goodbye.",
        ),
    ]


class CallRoutingEngine:
    """
    Produces exactly one RoutingDecision per webhook.

    Routing reads the agent directory but never writes anything; call
    events are recorded by the status callbacks.
    """

    def __init__(self, directory: AgentDirectory, config: Optional[Settings] = None):
        self.directory = directory
        self.config = config or settings
        self.departments = build_departments(self.config)

    # ==================== Inbound / client legs ====================

    async def route_call(
        self,
        params: TwilioCallParams,
        attempt: int = 1,
        bridge_agent: Optional[str] = None
    ) -> RoutingDecision:
        """
        Route a new call leg

        Args:
            params: Validated webhook parameters
            attempt: How many times the menu has been offered, counting this one
            bridge_agent: Staff id to connect for click-to-call legs

        Returns:
            The routing decision for this leg
        """
        caller = (params.from_ or "").strip()

        if not caller:
            logger.warning(f"Call {params.call_sid} has no caller identity")
            return RejectInvalid(message=MISSING_CALLER_MESSAGE)

        if self.is_internal_client(caller):
            return self._route_client_leg(params)

        if params.direction == CallDirection.OUTBOUND_API.value and bridge_agent:
            logger.info(f"Bridging click-to-call {params.call_sid} to agent {bridge_agent}")
            return DialClient(identity=bridge_agent, caller_id=params.to)

        # Withheld or non-numeric caller ids fall through to the menu
        if self.config.inbound_routing_mode == "direct" and is_e164(caller):
            rule = EligibilityRule(
                roles=frozenset(self.config.direct_roles),
                require_incoming_flag=True
            )
            return await self._dial_available_agent(rule, caller_id=caller)

        return self.menu(attempt)

    def _route_client_leg(self, params: TwilioCallParams) -> RoutingDecision:
        destination = (params.to or "").strip()
        if not is_e164(destination):
            logger.warning(
                f"Rejecting client call {params.call_sid} from {params.from_}: "
                f"invalid destination {destination!r}"
            )
            return RejectInvalid(message=INVALID_DESTINATION_MESSAGE)

        logger.info(f"Outbound call from {params.from_} to {destination}")
        return DialNumber(number=destination, caller_id=self.config.twilio_phone_number)

    # ==================== IVR menu ====================

    def menu(self, attempt: int = 1, preface: Optional[str] = None) -> PlayIvrMenu:
        max_attempts = max(1, self.config.ivr_max_attempts)
        return PlayIvrMenu(
            options=[
                MenuOption(digit=d.digit, key=d.key, prompt=d.prompt)
                for d in self.departments
            ],
            attempt=min(max(1, attempt), max_attempts),
            max_attempts=max_attempts,
            preface=preface,
        )

    async def route_gather(self, params: TwilioCallParams, attempt: int = 1) -> RoutingDecision:
        """Route the digit collected by the IVR menu"""
        digits = (params.digits or "").strip()
        department = self.department_for(digits)

        if department is None:
            logger.info(f"Unrecognized menu input {digits!r} on attempt {attempt}")
            if attempt >= self.config.ivr_max_attempts:
                return SayAndHangup(message=MENU_EXHAUSTED_MESSAGE)
            return self.menu(attempt + 1, preface=INVALID_OPTION_MESSAGE)

        if department.rule is None:
            return SayAndHangup(message=department.info_message or "Goodbye.")

        return await self._dial_available_agent(
            department.rule,
            caller_id=params.from_,
            announcement=f"Connecting you with a {department.label} agent. Please wait.",
        )

    def department_for(self, digits: str) -> Optional[Department]:
        for department in self.departments:
            if department.digit == digits:
                return department
        return None

    # ==================== Helpers ====================

    async def _dial_available_agent(
        self,
        rule: EligibilityRule,
        caller_id: Optional[str] = None,
        announcement: Optional[str] = None
    ) -> RoutingDecision:
        try:
            agent = await self.directory.select_agent(rule)
        except DocumentStoreError as e:
            logger.error(f"Agent lookup failed: {e.message}")
            return SayAndHangup(message=UPSTREAM_FAILURE_MESSAGE)

        if agent is None:
            return NoAgentsAvailable(message=NO_AGENTS_MESSAGE)

        return DialAgent(agent_id=agent.id, caller_id=caller_id, announcement=announcement)

    def is_internal_client(self, identity: str) -> bool:
        return identity.startswith(self.config.client_identity_prefix)
