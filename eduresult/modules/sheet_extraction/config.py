"""
Sheet Extraction Configuration
==============================
Configuration settings for the answer sheet extraction module.
All settings can be overridden via environment variables.

Supports multiple vision providers:
- Ollama (local inference, e.g. llama3.2-vision)
- Groq Cloud (OpenAI-compatible API)
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass
class ExtractionConfig:
    """Configuration for the sheet extraction module"""

    # ===== Provider Settings =====
    EXTRACTION_PROVIDER: str = "ollama"  # "ollama" or "groq"
    TEMPERATURE: float = 0.0

    # ===== Ollama Vision Settings =====
    OLLAMA_VISION_MODEL: str = "llama3.2-vision:latest"
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_NUM_CTX: int = 4096

    # ===== Groq Cloud Settings =====
    GROQ_API_KEY: Optional[str] = None
    GROQ_VISION_MODEL: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MAX_TOKENS: int = 1024
    GROQ_FALLBACK_TO_OLLAMA: bool = False

    def __post_init__(self):
        """Load settings from environment variables"""
        self.EXTRACTION_PROVIDER = os.getenv(
            "EXTRACTION_PROVIDER", self.EXTRACTION_PROVIDER
        ).lower()
        self.TEMPERATURE = float(os.getenv("EXTRACTION_TEMPERATURE", self.TEMPERATURE))

        # Ollama
        self.OLLAMA_VISION_MODEL = os.getenv("OLLAMA_VISION_MODEL", self.OLLAMA_VISION_MODEL)
        self.OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", self.OLLAMA_BASE_URL)
        self.OLLAMA_NUM_CTX = int(os.getenv("OLLAMA_NUM_CTX", self.OLLAMA_NUM_CTX))

        # Groq Cloud
        self.GROQ_API_KEY = os.getenv("GROQ_API_KEY")
        self.GROQ_VISION_MODEL = os.getenv("GROQ_VISION_MODEL", self.GROQ_VISION_MODEL)
        self.GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", self.GROQ_BASE_URL)
        self.GROQ_FALLBACK_TO_OLLAMA = os.getenv(
            "GROQ_FALLBACK_TO_OLLAMA", "false"
        ).lower() == "true"


# Global config instance
extraction_config = ExtractionConfig()
