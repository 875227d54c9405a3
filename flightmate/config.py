"""
FlightMate Service Configuration
Loads settings from environment variables
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""

    # LLM Configuration (OpenAI if a key is set, otherwise local Ollama)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))

    # Flight Search (SerpAPI google_flights engine)
    SERP_API_KEY: str = os.getenv("SERP_API_KEY", "")
    SERP_API_URL: str = os.getenv("SERP_API_URL", "https://serpapi.com/search.json")
    FLIGHT_SEARCH_TIMEOUT: float = float(os.getenv("FLIGHT_SEARCH_TIMEOUT", "30"))

    # MongoDB Configuration
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "flightmate")
    MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "3000"))

    # JWT Configuration
    JWT_SECRET: str = os.getenv("JWT_SECRET", "super-secret-key-change-in-production")
    JWT_EXPIRES_IN: str = os.getenv("JWT_EXPIRES_IN", "7d")

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "3000"))
    API_ENV: str = os.getenv("API_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Configuration
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")

    # Conversation Settings
    HISTORY_WINDOW: int = int(os.getenv("HISTORY_WINDOW", "4"))
    TITLE_REFRESH_INTERVAL: int = int(os.getenv("TITLE_REFRESH_INTERVAL", "6"))

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def use_openai(self) -> bool:
        """OpenAI is used only with a real-looking key"""
        return bool(self.OPENAI_API_KEY) and not self.OPENAI_API_KEY.startswith("sk-your")

    @property
    def is_development(self) -> bool:
        return self.API_ENV == "development"


# Global settings instance
settings = Settings()
