"""
Langchain Prompt Templates
Defines prompts for the flight assistant, the personal assistant and
session titles
"""

from langchain_core.prompts import PromptTemplate

# ============================================
# System Prompts
# ============================================

FLIGHT_SYSTEM_PROMPT = (
    "You are FlightMate's flight assistant. You help users find flights, "
    "confirm what you understood, and ask briefly for anything missing. "
    "Be friendly, concise and practical."
)

PERSONAL_SYSTEM_PROMPT = (
    "You are FlightMate's personal assistant. You chat naturally, remember "
    "what the user tells you about themselves, and mention that you can "
    "also search flights when it is relevant."
)

# ============================================
# Flight Assistant Prompts
# ============================================

FLIGHT_HELP_PROMPT = PromptTemplate(
    input_variables=["user_message"],
    template="""The user said: "{user_message}"

This seems like they want to search for flights, but I need more information.

Provide a friendly, conversational response that:
1. Acknowledges what they said
2. Asks for the missing information (departure city, arrival city, dates)
3. Gives a helpful example
4. Keeps it brief and encouraging"""
)

FLIGHT_CLARIFICATION_PROMPT = PromptTemplate(
    input_variables=["user_message", "understood", "missing"],
    template="""User said: "{user_message}"

I understood these details:
{understood}

But I still need: {missing}

Provide a friendly, conversational response that:
1. Confirms what I understood
2. Asks ONLY for the missing information listed above
3. Keeps it brief and helpful"""
)

FLIGHT_SEARCH_ERROR_PROMPT = PromptTemplate(
    input_variables=["user_message", "trip_type", "search_details", "error"],
    template="""A user asked: "{user_message}"

I tried to search for {trip_type} flights with these details:
{search_details}

But the flight search returned this error: "{error}"

Provide a friendly response that:
1. Acknowledges their request positively
2. Explains what went wrong simply
3. Suggests what they can try (different dates, route, etc.)
4. Stays encouraging and helpful"""
)

FLIGHT_RESULTS_PROMPT = PromptTemplate(
    input_variables=["user_message", "trip_type", "flight_summary", "route", "dates"],
    template="""User asked: "{user_message}"

Here are the {trip_type} flight options found:

{flight_summary}

Search: {route}
{dates}

Provide a helpful, concise summary with:
1. Best value options
2. Quickest options
3. Any notable differences
4. Practical booking advice

Keep it friendly and actionable!"""
)

# ============================================
# Personal Assistant Prompts
# ============================================

PERSONAL_REPLY_PROMPT = PromptTemplate(
    input_variables=["known_context", "user_message"],
    template="""Context about the user:
{known_context}

User message: {user_message}

Respond naturally, using the context when relevant."""
)

PERSONAL_CONTEXT_PROMPT = PromptTemplate(
    input_variables=["user_message"],
    template="""Analyze this message and extract personal information: "{user_message}"

Extract (only if explicitly mentioned):
- name
- age
- location (city/country)
- occupation
- email
- phone

Return ONLY a valid JSON object with these exact keys, using null for
anything not mentioned. Do not include any explanation or markdown formatting.

Example:
Message: "Hi, I'm Priya and I work as a nurse in Pune"
Response: {{"name": "Priya", "age": null, "location": "Pune", "occupation": "nurse", "email": null, "phone": null}}

JSON Response:"""
)

FOLLOW_UP_PROMPT = PromptTemplate(
    input_variables=["user_message", "assistant_message"],
    template="""Based on this conversation:
User: "{user_message}"
Assistant: "{assistant_message}"

Suggest 3 brief, natural follow-up questions the user might want to ask next.
Each should be a complete question, max 10 words.
Respond with just the 3 questions, one per line."""
)

# ============================================
# Session Title Prompts
# ============================================

SESSION_TITLE_PROMPT = PromptTemplate(
    input_variables=["user_message"],
    template="""Based on this user message, generate a short, concise title (max 50 characters) that summarizes the conversation topic. Only return the title, nothing else.

User message: "{user_message}"

Title:"""
)

SESSION_TITLE_REFRESH_PROMPT = PromptTemplate(
    input_variables=["conversation"],
    template="""Based on this conversation, generate a short, concise title (max 50 characters) that best summarizes the main topic or purpose of this chat. Only return the title, nothing else.

Conversation:
{conversation}

Title:"""
)
