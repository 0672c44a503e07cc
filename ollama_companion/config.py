"""
Configuration module for Ollama Companion.
Loads settings from environment variables or .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from project root (parent of ollama_companion/ directory)
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    """Application configuration."""

    # Ollama server settings
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")

    # Generation settings
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.7"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "2048"))

    # Total time allowed for one request, from connect to the last streamed line
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "300"))

    # System prompt personalization
    BASE_PROMPT: str = os.getenv("BASE_PROMPT", "")
    INCLUDE_LOCAL_TIME: bool = _env_bool("INCLUDE_LOCAL_TIME")
    INCLUDE_LOCATION: bool = _env_bool("INCLUDE_LOCATION")

    # Transcript storage
    CONVERSATIONS_DIR: Path = Path(
        os.getenv(
            "CONVERSATIONS_DIR",
            str(Path.home() / ".ollama_companion" / "conversations"),
        )
    ).expanduser()

    # API settings
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8765"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values."""
        if not cls.OLLAMA_BASE_URL.startswith(("http://", "https://")):
            raise ValueError(
                f"OLLAMA_BASE_URL must be an http(s) URL. "
                f"Current value: {cls.OLLAMA_BASE_URL}"
            )
        if not 0.0 <= cls.LLM_TEMPERATURE <= 2.0:
            raise ValueError(
                f"LLM_TEMPERATURE must be between 0 and 2. Got: {cls.LLM_TEMPERATURE}"
            )
        if cls.LLM_MAX_TOKENS <= 0:
            raise ValueError(
                f"LLM_MAX_TOKENS must be a positive integer. Got: {cls.LLM_MAX_TOKENS}"
            )
        if cls.REQUEST_TIMEOUT <= 0:
            raise ValueError(
                f"REQUEST_TIMEOUT must be positive. Got: {cls.REQUEST_TIMEOUT}"
            )


@dataclass
class ChatSettings:
    """User-adjustable settings consulted when a request is assembled."""
    default_model: str
    temperature: float
    max_tokens: int
    base_prompt: str = ""
    include_local_time: bool = False
    include_location: bool = False

    @classmethod
    def from_config(cls) -> "ChatSettings":
        """Build settings from the loaded configuration."""
        return cls(
            default_model=Config.OLLAMA_MODEL,
            temperature=Config.LLM_TEMPERATURE,
            max_tokens=Config.LLM_MAX_TOKENS,
            base_prompt=Config.BASE_PROMPT,
            include_local_time=Config.INCLUDE_LOCAL_TIME,
            include_location=Config.INCLUDE_LOCATION,
        )


# Singleton config instance
config = Config()
