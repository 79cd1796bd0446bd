"""
Tests for the call routing engine and agent directory
"""

import asyncio
import random

import pytest

from crm_voice.core.config import settings
from crm_voice.core.exceptions import DocumentStoreError
from crm_voice.db.adapters.memory import InMemoryDocumentStore
from crm_voice.db.models import STAFF_COLLECTION
from crm_voice.db.repository import StaffRepository
from crm_voice.models.agent import Agent, EligibilityRule
from crm_voice.models.call import TwilioCallParams
from crm_voice.models.routing import (
    DialAgent,
    DialClient,
    DialNumber,
    NoAgentsAvailable,
    PlayIvrMenu,
    RejectInvalid,
    SayAndHangup,
)
from crm_voice.services.agent_directory import AgentDirectory
from crm_voice.services.call_router import (
    INVALID_DESTINATION_MESSAGE,
    INVALID_OPTION_MESSAGE,
    MENU_EXHAUSTED_MESSAGE,
    MISSING_CALLER_MESSAGE,
    NO_AGENTS_MESSAGE,
    UPSTREAM_FAILURE_MESSAGE,
    CallRoutingEngine,
)


class FailingStore(InMemoryDocumentStore):
    """Store whose queries always fail"""

    async def query(self, collection, filters=(), limit=None):
        raise RuntimeError("backend unavailable")


class SlowStore(InMemoryDocumentStore):
    """Store whose queries never answer in time"""

    async def query(self, collection, filters=(), limit=None):
        await asyncio.sleep(1)
        return []


def make_engine(store, config=None, timeout=None):
    directory = AgentDirectory(StaffRepository(store, timeout=timeout), rng=random.Random(0))
    return CallRoutingEngine(directory, config or settings)


def params(**values):
    return TwilioCallParams.from_form({"CallSid": "CA123", **values})


class TestEligibilityRule:
    """Tests for agent eligibility"""

    def test_role_membership(self):
        rule = EligibilityRule.for_roles(["Admin", "Broker"])
        assert rule.matches(Agent(id="a", role="Broker"))
        assert not rule.matches(Agent(id="b", role="Sales Rep", canReceiveIncomingCalls=True))

    def test_incoming_flag(self):
        rule = EligibilityRule.incoming_flag()
        assert rule.matches(Agent(id="a", role="Sales Rep", canReceiveIncomingCalls=True))
        assert not rule.matches(Agent(id="b", role="Admin"))

    def test_role_or_flag(self):
        rule = EligibilityRule(roles=frozenset({"Admin"}), require_incoming_flag=True)
        assert rule.matches(Agent(id="a", role="Admin"))
        assert rule.matches(Agent(id="b", role="Sales Rep", canReceiveIncomingCalls=True))
        assert not rule.matches(Agent(id="c", role="Sales Rep"))

    def test_empty_rule(self):
        assert EligibilityRule().is_empty
        assert not EligibilityRule().matches(Agent(id="a", role="Admin", canReceiveIncomingCalls=True))


class TestAgentDirectory:
    """Tests for agent lookup and selection"""

    @pytest.mark.asyncio
    async def test_eligible_agents_by_role(self, document_store):
        directory = AgentDirectory(StaffRepository(document_store))
        agents = await directory.eligible_agents(EligibilityRule.for_roles(["Broker"]))
        assert [agent.id for agent in agents] == ["agent42"]

    @pytest.mark.asyncio
    async def test_eligible_agents_role_or_flag_merges_without_duplicates(self, document_store):
        await document_store.add(STAFF_COLLECTION, {
            "name": "Flagged Broker", "role": "Broker", "canReceiveIncomingCalls": True
        }, document_id="agent50")
        directory = AgentDirectory(StaffRepository(document_store))

        rule = EligibilityRule(roles=frozenset({"Broker"}), require_incoming_flag=True)
        agents = await directory.eligible_agents(rule)

        assert sorted(agent.id for agent in agents) == ["agent42", "agent50", "agent7"]

    @pytest.mark.asyncio
    async def test_select_agent_is_always_eligible(self, document_store):
        directory = AgentDirectory(StaffRepository(document_store), rng=random.Random(3))
        rule = EligibilityRule(roles=frozenset({"Broker"}), require_incoming_flag=True)
        for _ in range(20):
            agent = await directory.select_agent(rule)
            assert agent.id in {"agent42", "agent7"}

    @pytest.mark.asyncio
    async def test_seeded_selection_is_reproducible(self, document_store):
        rule = EligibilityRule(roles=frozenset({"Broker"}), require_incoming_flag=True)
        first = AgentDirectory(StaffRepository(document_store), rng=random.Random(11))
        second = AgentDirectory(StaffRepository(document_store), rng=random.Random(11))
        picks_first = [(await first.select_agent(rule)).id for _ in range(10)]
        picks_second = [(await second.select_agent(rule)).id for _ in range(10)]
        assert picks_first == picks_second

    @pytest.mark.asyncio
    async def test_no_eligible_agents(self):
        directory = AgentDirectory(StaffRepository(InMemoryDocumentStore()))
        assert await directory.select_agent(EligibilityRule.for_roles(["Admin"])) is None

    @pytest.mark.asyncio
    async def test_store_failure_raises(self):
        directory = AgentDirectory(StaffRepository(FailingStore()))
        with pytest.raises(DocumentStoreError):
            await directory.eligible_agents(EligibilityRule.for_roles(["Admin"]))

    @pytest.mark.asyncio
    async def test_store_timeout_raises(self):
        directory = AgentDirectory(StaffRepository(SlowStore(), timeout=0.01))
        with pytest.raises(DocumentStoreError) as exc_info:
            await directory.eligible_agents(EligibilityRule.for_roles(["Admin"]))
        assert "timed out" in exc_info.value.message


class TestRouteCall:
    """Tests for routing new call legs"""

    @pytest.mark.asyncio
    async def test_missing_caller_is_rejected(self, document_store):
        decision = await make_engine(document_store).route_call(params(To="+15551234567"))
        assert isinstance(decision, RejectInvalid)
        assert decision.message == MISSING_CALLER_MESSAGE

    @pytest.mark.asyncio
    async def test_blank_caller_is_rejected(self, document_store):
        decision = await make_engine(document_store).route_call(params(From="  ", To="+15551234567"))
        assert isinstance(decision, RejectInvalid)

    @pytest.mark.asyncio
    async def test_client_call_dials_number_with_business_caller_id(self, document_store):
        decision = await make_engine(document_store).route_call(
            params(From="client:agent42", To="+14155550100")
        )
        assert decision == DialNumber(number="+14155550100", caller_id=settings.twilio_phone_number)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("destination", [None, "", "4155550100", "+0123456789", "client:agent7", "+1 415"])
    async def test_client_call_with_invalid_destination(self, document_store, destination):
        values = {"From": "client:agent42"}
        if destination is not None:
            values["To"] = destination
        decision = await make_engine(document_store).route_call(params(**values))
        assert isinstance(decision, RejectInvalid)
        assert decision.message == INVALID_DESTINATION_MESSAGE

    @pytest.mark.asyncio
    async def test_inbound_call_dials_agent_by_default(self, document_store):
        decision = await make_engine(document_store).route_call(
            params(From="+14155550100", To="+15551234567", Direction="inbound")
        )
        assert decision == DialAgent(agent_id="agent7", caller_id="+14155550100")

    @pytest.mark.asyncio
    async def test_inbound_call_without_agents_by_default(self):
        decision = await make_engine(InMemoryDocumentStore()).route_call(
            params(From="+14155550100", To="+15551234567", Direction="inbound")
        )
        assert decision == NoAgentsAvailable(message=NO_AGENTS_MESSAGE)

    @pytest.mark.asyncio
    async def test_withheld_caller_falls_back_to_menu(self, document_store):
        decision = await make_engine(document_store).route_call(
            params(From="anonymous", To="+15551234567", Direction="inbound")
        )
        assert isinstance(decision, PlayIvrMenu)

    @pytest.mark.asyncio
    async def test_ivr_mode_plays_menu(self, document_store):
        config = settings.model_copy(update={"inbound_routing_mode": "ivr"})
        decision = await make_engine(document_store, config=config).route_call(
            params(From="+14155550100", To="+15551234567", Direction="inbound")
        )
        assert isinstance(decision, PlayIvrMenu)
        assert [option.digit for option in decision.options] == ["1", "2", "3"]
        assert decision.attempt == 1

    @pytest.mark.asyncio
    async def test_menu_attempt_is_clamped(self, document_store):
        config = settings.model_copy(update={"inbound_routing_mode": "ivr"})
        decision = await make_engine(document_store, config=config).route_call(
            params(From="+14155550100", To="+15551234567"), attempt=99
        )
        assert decision.attempt == settings.ivr_max_attempts
        assert decision.is_last_attempt

    @pytest.mark.asyncio
    async def test_click_to_call_leg_bridges_agent(self, document_store):
        decision = await make_engine(document_store).route_call(
            params(From="+15551234567", To="+14155550100", Direction="outbound-api"),
            bridge_agent="agent42"
        )
        assert decision == DialClient(identity="agent42", caller_id="+14155550100")

    @pytest.mark.asyncio
    async def test_direct_mode_dials_eligible_agent(self, document_store):
        config = settings.model_copy(update={
            "inbound_routing_mode": "direct",
            "direct_agent_roles": "Broker",
        })
        engine = make_engine(document_store, config=config)

        for _ in range(10):
            decision = await engine.route_call(params(From="+14155550100", To="+15551234567"))
            assert isinstance(decision, DialAgent)
            assert decision.agent_id in {"agent42", "agent7"}
            assert decision.caller_id == "+14155550100"

    @pytest.mark.asyncio
    async def test_direct_mode_without_agents(self):
        config = settings.model_copy(update={"inbound_routing_mode": "direct"})
        engine = make_engine(InMemoryDocumentStore(), config=config)
        decision = await engine.route_call(params(From="+14155550100", To="+15551234567"))
        assert decision == NoAgentsAvailable(message=NO_AGENTS_MESSAGE)

    @pytest.mark.asyncio
    async def test_direct_mode_store_failure(self):
        config = settings.model_copy(update={"inbound_routing_mode": "direct"})
        engine = make_engine(FailingStore(), config=config)
        decision = await engine.route_call(params(From="+14155550100", To="+15551234567"))
        assert decision == SayAndHangup(message=UPSTREAM_FAILURE_MESSAGE)

    @pytest.mark.asyncio
    async def test_routing_never_writes(self, document_store):
        engine = make_engine(document_store)
        await engine.route_call(params(From="client:agent42", To="+14155550100"))
        await engine.route_gather(params(From="+14155550100", Digits="1"))
        assert sorted(document_store._collections) == ["leads", "staff"]


class TestRouteGather:
    """Tests for IVR menu input"""

    @pytest.mark.asyncio
    async def test_sales_digit_dials_sales_role(self, document_store):
        engine = make_engine(document_store)
        decision = await engine.route_gather(params(From="+14155550100", Digits="1"))
        assert isinstance(decision, DialAgent)
        assert decision.agent_id == "agent42"
        assert decision.caller_id == "+14155550100"
        assert "sales" in decision.announcement

    @pytest.mark.asyncio
    async def test_support_digit_dials_flagged_agent(self, document_store):
        engine = make_engine(document_store)
        decision = await engine.route_gather(params(From="+14155550100", Digits="2"))
        assert isinstance(decision, DialAgent)
        assert decision.agent_id == "agent7"
        assert decision.announcement

    @pytest.mark.asyncio
    async def test_info_digit_says_hours(self, document_store):
        decision = await make_engine(document_store).route_gather(params(From="+14155550100", Digits="3"))
        assert isinstance(decision, SayAndHangup)
        assert settings.business_hours_message in decision.message

    @pytest.mark.asyncio
    async def test_invalid_digit_replays_menu(self, document_store):
        decision = await make_engine(document_store).route_gather(
            params(From="+14155550100", Digits="9"), attempt=1
        )
        assert isinstance(decision, PlayIvrMenu)
        assert decision.attempt == 2
        assert decision.preface == INVALID_OPTION_MESSAGE

    @pytest.mark.asyncio
    async def test_invalid_digit_on_last_attempt_hangs_up(self, document_store):
        decision = await make_engine(document_store).route_gather(
            params(From="+14155550100", Digits="9"), attempt=settings.ivr_max_attempts
        )
        assert decision == SayAndHangup(message=MENU_EXHAUSTED_MESSAGE)

    @pytest.mark.asyncio
    async def test_no_sales_agents(self):
        decision = await make_engine(InMemoryDocumentStore()).route_gather(
            params(From="+14155550100", Digits="1")
        )
        assert decision == NoAgentsAvailable(message=NO_AGENTS_MESSAGE)

    @pytest.mark.asyncio
    async def test_store_failure_apologises(self):
        decision = await make_engine(FailingStore()).route_gather(
            params(From="+14155550100", Digits="2")
        )
        assert decision == SayAndHangup(message=UPSTREAM_FAILURE_MESSAGE)
