"""
Sheet Extraction Module
=======================
AI-assisted data entry: turns a photographed answer sheet into a partial
student record using a swappable vision provider (Ollama/Groq).

Usage:
    from eduresult.modules.sheet_extraction import ExtractionClient, ProviderFactory

    client = ExtractionClient(ProviderFactory.create())
    partial = await client.extract(jpeg_bytes, fixed_exam_name="Finals")
"""

from .client import (
    ANSWER_SHEET_SCHEMA,
    EXTRACTION_INSTRUCTION,
    ExtractionAttempt,
    ExtractionClient,
    ExtractionState,
    parse_extraction_payload,
)
from .config import ExtractionConfig, extraction_config
from .providers import (
    BaseExtractionProvider,
    ExtractionProvider,
    GroqVisionProvider,
    OllamaVisionProvider,
    ProviderFactory,
    build_vision_message,
    parse_json_content,
)

__all__ = [
    "ANSWER_SHEET_SCHEMA",
    "EXTRACTION_INSTRUCTION",
    "ExtractionAttempt",
    "ExtractionClient",
    "ExtractionState",
    "parse_extraction_payload",
    "ExtractionConfig",
    "extraction_config",
    "BaseExtractionProvider",
    "ExtractionProvider",
    "GroqVisionProvider",
    "OllamaVisionProvider",
    "ProviderFactory",
    "build_vision_message",
    "parse_json_content",
]
