# agents/personal_agent.py
"""
Personal Assistant
General conversation that remembers what the user shares about themselves.

Personal facts are pulled out rule-first (regexes); when the LLM is up, its
JSON extraction is merged over the rule results.
"""

import json
import re
from typing import Optional, Dict, Any, List

from loguru import logger

from ..llm.prompts import (
    PERSONAL_SYSTEM_PROMPT,
    PERSONAL_REPLY_PROMPT,
    PERSONAL_CONTEXT_PROMPT,
    FOLLOW_UP_PROMPT,
)
from ..llm.text_generator import TextGenerator, GenerationError
from ..schemas.chat_schemas import FLIGHT_CONTEXT_KEYS, PersonalAgentResult

PERSONAL_CONTEXT_KEYS = ("name", "age", "location", "occupation", "email", "phone")

GREETING_FALLBACK = "I'm here to help! How can I assist you today?"
DEFAULT_FOLLOW_UPS = [
    "Tell me about yourself",
    "What can you help me with?",
    "Search for flights",
]

NOT_A_NAME = {"at", "on", "back", "later", "me", "when", "if", "please"}

NAME_RE = re.compile(
    r"(?i:\bmy name is|\bcall me|\bi'm called|\bi am called)\s+"
    r"([A-Za-z][A-Za-z'-]*(?:\s+[A-Z][A-Za-z'-]*)?)"
)
AGE_RE = re.compile(r"\b(?:i am|i'm)\s+(\d{1,3})\s+years?\s+old\b|\bmy age is\s+(\d{1,3})\b", re.IGNORECASE)
LOCATION_RE = re.compile(
    r"\b(?:i live in|i'm from|i am from|i reside in|i stay in)\s+"
    r"([A-Za-z][A-Za-z .'-]*?)(?=\s*[,.!?;]|\s+(?:and|but|now|since)\b|$)",
    re.IGNORECASE,
)
OCCUPATION_RE = re.compile(
    r"\b(?:i work as|i'm employed as|i am employed as)\s+(?:an?\s+)?"
    r"([A-Za-z][A-Za-z -]*?)(?=\s*[,.!?;]|\s+(?:and|but|at|in|for)\b|$)",
    re.IGNORECASE,
)
EMAIL_RE = re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b")
PHONE_RE = re.compile(
    r"(?:\bmy (?:phone(?: number)?|number) is|\bcontact me at|\breach me at|\bcall me at)\s*"
    r"(\+?\d[\d\s()-]{6,}\d)",
    re.IGNORECASE,
)


def extract_personal_facts(message: str) -> Dict[str, str]:
    """Rule-based personal facts from one message"""
    facts: Dict[str, str] = {}

    name = NAME_RE.search(message)
    if name and name.group(1).split()[0].lower() not in NOT_A_NAME:
        facts["name"] = name.group(1).strip()

    age = AGE_RE.search(message)
    if age:
        facts["age"] = age.group(1) or age.group(2)

    location = LOCATION_RE.search(message)
    if location:
        facts["location"] = location.group(1).strip()

    occupation = OCCUPATION_RE.search(message)
    if occupation:
        facts["occupation"] = occupation.group(1).strip()

    email = EMAIL_RE.search(message)
    if email:
        facts["email"] = email.group(0)

    phone = PHONE_RE.search(message)
    if phone:
        facts["phone"] = phone.group(1).strip()

    return facts


def parse_json_facts(text: str) -> Dict[str, str]:
    """Personal keys from an LLM JSON reply; anything unparsable yields {}"""
    match = re.search(r"\{[\s\S]*\}", text or "")
    if not match:
        return {}
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug(f"Context JSON parse failed: {e}")
        return {}
    if isinstance(data.get("personalInfo"), dict):
        data = data["personalInfo"]
    return {
        key: str(data[key]).strip()
        for key in PERSONAL_CONTEXT_KEYS
        if data.get(key) not in (None, "", "null") and str(data[key]).strip()
    }


def parse_follow_ups(text: str) -> List[str]:
    questions = []
    for line in (text or "").splitlines():
        line = re.sub(r"^\s*(?:[-*•]|\d+[.)])\s*", "", line).strip()
        if line and len(line) < 100:
            questions.append(line)
    return questions[:3]


class PersonalAgent:
    """Stateless per call; known context comes from the session store"""

    def __init__(self, text_generator: TextGenerator):
        self.text_generator = text_generator

    async def process(self, message: str, context: Optional[Dict[str, Any]] = None) -> PersonalAgentResult:
        extracted = extract_personal_facts(message)
        known = {
            key: value for key, value in (context or {}).items()
            if key not in FLIGHT_CONTEXT_KEYS.values() and value not in (None, "")
        }

        try:
            extracted.update(await self._extract_with_llm(message))
            known.update(extracted)

            if known:
                prompt = PERSONAL_REPLY_PROMPT.format(
                    known_context="\n".join(f"- {key}: {value}" for key, value in known.items()),
                    user_message=message,
                )
            else:
                prompt = message

            reply = await self.text_generator.complete(prompt, system_prompt=PERSONAL_SYSTEM_PROMPT)
        except GenerationError as e:
            logger.warning(f"Personal assistant falling back to canned reply: {e}")
            return PersonalAgentResult(
                message=GREETING_FALLBACK,
                context_extracted=extracted,
                context_updates=dict(extracted),
                suggested_follow_ups=list(DEFAULT_FOLLOW_UPS),
            )

        follow_ups = await self._generate_follow_ups(message, reply)

        return PersonalAgentResult(
            message=reply,
            context_extracted=extracted,
            context_updates=dict(extracted),
            suggested_follow_ups=follow_ups,
        )

    async def _extract_with_llm(self, message: str) -> Dict[str, str]:
        try:
            raw = await self.text_generator.complete(PERSONAL_CONTEXT_PROMPT.format(user_message=message))
        except GenerationError as e:
            logger.debug(f"LLM context extraction skipped: {e}")
            return {}
        return parse_json_facts(raw)

    async def _generate_follow_ups(self, message: str, reply: str) -> List[str]:
        try:
            raw = await self.text_generator.complete(
                FOLLOW_UP_PROMPT.format(user_message=message, assistant_message=reply)
            )
        except GenerationError as e:
            logger.debug(f"Follow-up generation failed: {e}")
            return list(DEFAULT_FOLLOW_UPS)
        return parse_follow_ups(raw) or list(DEFAULT_FOLLOW_UPS)
