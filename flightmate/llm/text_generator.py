"""
Generative Text Client
Single entry point for LLM calls: OpenAI when an API key is configured,
otherwise a local Ollama server.

- complete(): raises GenerationError on any failure or empty output
- complete_or(): never raises, returns the caller's fallback instead
"""

from typing import Optional

import httpx
from loguru import logger
from openai import AsyncOpenAI

from ..config import settings


class GenerationError(Exception):
    """The text service failed or returned nothing usable"""


class TextGenerator:
    """
    Thin async wrapper over the configured LLM provider.
    Callers wrap it at the call site and fall back to canned text.
    """

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        openai_model: Optional[str] = None,
        ollama_base_url: Optional[str] = None,
        ollama_model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        api_key = settings.OPENAI_API_KEY if openai_api_key is None else openai_api_key
        self.openai_model = openai_model or settings.OPENAI_MODEL
        self.ollama_base_url = (ollama_base_url or settings.OLLAMA_BASE_URL).rstrip("/")
        self.ollama_model = ollama_model or settings.OLLAMA_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT
        self.transport = transport

        self.openai_client = None
        if api_key and not api_key.startswith("sk-your"):
            try:
                self.openai_client = AsyncOpenAI(api_key=api_key, timeout=self.timeout)
                logger.info(f"TextGenerator: using OpenAI ({self.openai_model})")
            except Exception as e:
                logger.warning(f"TextGenerator: OpenAI init failed, using Ollama: {e}")

        if self.openai_client is None:
            logger.info(f"TextGenerator: using Ollama at {self.ollama_base_url} ({self.ollama_model})")

    @property
    def provider(self) -> str:
        return "openai" if self.openai_client else "ollama"

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate text for `prompt`; raises GenerationError on failure"""
        try:
            if self.openai_client:
                text = await self._call_openai(prompt, system_prompt)
            else:
                text = await self._call_ollama(prompt, system_prompt)
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"{self.provider} request failed: {e}") from e

        text = (text or "").strip()
        if not text:
            raise GenerationError(f"{self.provider} returned an empty response")
        return text

    async def complete_or(self, prompt: str, fallback: str, system_prompt: Optional[str] = None) -> str:
        """Generate text, or return `fallback` if anything goes wrong"""
        try:
            return await self.complete(prompt, system_prompt)
        except GenerationError as e:
            logger.warning(f"Text generation failed, using fallback: {e}")
            return fallback

    async def _call_openai(self, prompt: str, system_prompt: Optional[str]) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = await self.openai_client.chat.completions.create(
            model=self.openai_model,
            messages=messages,
            max_tokens=500,
            temperature=0.7,
        )
        return response.choices[0].message.content

    async def _call_ollama(self, prompt: str, system_prompt: Optional[str]) -> str:
        full_prompt = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.ollama_base_url}/api/generate",
                    json={
                        "model": self.ollama_model,
                        "prompt": full_prompt,
                        "stream": False,
                        "options": {
                            "temperature": 0.7,
                            "num_predict": 500
                        }
                    }
                )
        except httpx.ConnectError as e:
            raise GenerationError("Cannot connect to Ollama. Make sure Ollama is running.") from e

        if response.status_code != 200:
            raise GenerationError(f"Ollama error: {response.status_code}")

        return response.json().get("response", "")


# ============================================
# Singleton
# ============================================

_text_generator: Optional[TextGenerator] = None


def get_text_generator() -> TextGenerator:
    """Get or create the shared text generator"""
    global _text_generator
    if _text_generator is None:
        _text_generator = TextGenerator()
    return _text_generator
