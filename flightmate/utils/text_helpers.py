"""
Text Helpers
Small string utilities for session titles and message previews
"""

DEFAULT_SESSION_TITLE = "New Chat"
MAX_TITLE_LENGTH = 50
MAX_STORED_TITLE_LENGTH = 200
PREVIEW_LENGTH = 100


def truncate(text: str, limit: int) -> str:
    """Cut to `limit` chars, ending with "..." when shortened"""
    text = text or ""
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def clean_title(raw: str, limit: int = MAX_TITLE_LENGTH) -> str:
    """Strip quotes and whitespace from a generated title; empty becomes the default"""
    lines = (raw or "").strip().splitlines()
    title = lines[0].strip() if lines else ""
    if title.lower().startswith("title:"):
        title = title[len("title:"):].strip()
    title = title.strip("\"'`*").strip()
    if not title:
        return DEFAULT_SESSION_TITLE
    return truncate(title, limit)
