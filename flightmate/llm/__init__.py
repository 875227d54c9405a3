# llm/__init__.py
"""
LLM Components Package

- text_generator: OpenAI or Ollama completion with failure handling
- param_extractor: rule-based flight parameter extraction
- prompts: prompt templates
"""

from .text_generator import TextGenerator, GenerationError, get_text_generator
from .param_extractor import (
    FlightParamExtractor,
    extract_flight_params,
    extract_partial_flight_params,
    normalize_date,
)

__all__ = [
    "TextGenerator",
    "GenerationError",
    "get_text_generator",
    "FlightParamExtractor",
    "extract_flight_params",
    "extract_partial_flight_params",
    "normalize_date",
]
