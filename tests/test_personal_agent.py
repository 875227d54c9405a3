"""Tests for the personal assistant and its fact extraction."""

import pytest

from flightmate.agents.personal_agent import (
    DEFAULT_FOLLOW_UPS,
    GREETING_FALLBACK,
    PersonalAgent,
    extract_personal_facts,
    parse_follow_ups,
    parse_json_facts,
)

from conftest import ScriptedTextGenerator


# ============================================
# Rule-based extraction
# ============================================


class TestExtractPersonalFacts:
    def test_name_location_age(self):
        facts = extract_personal_facts("My name is Asha and I live in Pune, I am 29 years old")
        assert facts == {"name": "Asha", "location": "Pune", "age": "29"}

    def test_two_word_name(self):
        assert extract_personal_facts("Call me Asha Rao")["name"] == "Asha Rao"

    def test_call_me_at_is_a_phone_not_a_name(self):
        facts = extract_personal_facts("Call me at +1 415 555 0100")
        assert "name" not in facts
        assert facts["phone"] == "+1 415 555 0100"

    def test_occupation_and_email(self):
        facts = extract_personal_facts("I work as a software engineer at Acme, my email is asha@example.com")
        assert facts["occupation"] == "software engineer"
        assert facts["email"] == "asha@example.com"

    def test_nothing_personal(self):
        assert extract_personal_facts("Flights from Mumbai to Dubai") == {}


class TestParsing:
    def test_json_with_nulls(self):
        raw = 'Sure: {"name": "Priya", "age": null, "location": "Pune", "email": ""}'
        assert parse_json_facts(raw) == {"name": "Priya", "location": "Pune"}

    def test_nested_personal_info(self):
        assert parse_json_facts('{"personalInfo": {"occupation": "nurse"}}') == {"occupation": "nurse"}

    def test_unparsable_json(self):
        assert parse_json_facts("no json here") == {}
        assert parse_json_facts("{not: valid}") == {}

    def test_follow_ups_strip_list_markers(self):
        raw = "1. What else can you do?\n- Any travel tips?\n\n3) Tell me a joke\n4. One too many"
        assert parse_follow_ups(raw) == ["What else can you do?", "Any travel tips?", "Tell me a joke"]


# ============================================
# Agent
# ============================================


def scripted(prompt: str) -> str:
    if "extract personal information" in prompt:
        return '{"name": "Priya", "occupation": "nurse", "age": null}'
    if "follow-up questions" in prompt:
        return "How was your day?\nWhere are you headed next?\nNeed any flights?"
    return "Nice to meet you, Priya!"


class TestPersonalAgent:
    @pytest.mark.asyncio
    async def test_offline_falls_back_but_keeps_rule_facts(self):
        agent = PersonalAgent(ScriptedTextGenerator())
        result = await agent.process("Hi, my name is Asha")
        assert result.message == GREETING_FALLBACK
        assert result.suggested_follow_ups == DEFAULT_FOLLOW_UPS
        assert result.context_updates == {"name": "Asha"}

    @pytest.mark.asyncio
    async def test_llm_facts_merge_over_rule_facts(self):
        generator = ScriptedTextGenerator(scripted)
        agent = PersonalAgent(generator)
        result = await agent.process("Hey there, I live in Pune. I'm Priya, a nurse.")
        assert result.message == "Nice to meet you, Priya!"
        assert result.context_extracted == {"location": "Pune", "name": "Priya", "occupation": "nurse"}
        assert result.suggested_follow_ups == [
            "How was your day?",
            "Where are you headed next?",
            "Need any flights?",
        ]

    @pytest.mark.asyncio
    async def test_known_context_reaches_the_prompt(self):
        generator = ScriptedTextGenerator(scripted)
        agent = PersonalAgent(generator)
        context = {"location": "Pune", "flight_departure_id": "BOM"}
        await agent.process("What do you know about me?", context)
        reply_prompt = generator.prompts[1]
        assert "- location: Pune" in reply_prompt
        assert "flight_departure_id" not in reply_prompt

    @pytest.mark.asyncio
    async def test_plain_message_without_context(self):
        generator = ScriptedTextGenerator(lambda prompt: "" if "extract" in prompt else "Hello!")
        agent = PersonalAgent(generator)
        result = await agent.process("hello")
        assert result.message == "Hello!"
        assert generator.prompts[1] == "hello"
        assert result.context_extracted == {}
