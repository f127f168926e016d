"""
Extraction Providers Module
===========================
Abstraction layer for swappable structured-extraction backends.
A provider accepts an image and a JSON schema and returns a JSON object.
Supports Ollama (local vision models) and Groq Cloud (OpenAI-compatible).
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from enum import Enum

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage
from langchain_ollama import ChatOllama
from langchain_openai import ChatOpenAI

from .config import extraction_config

logger = logging.getLogger(__name__)


class ExtractionProvider(str, Enum):
    """Supported extraction providers"""
    OLLAMA = "ollama"
    GROQ = "groq"


def build_vision_message(
    image_b64: str,
    instruction: str,
    schema: Optional[Dict[str, Any]] = None
) -> HumanMessage:
    """
    Build a multimodal message carrying the instruction and a JPEG image.

    The schema is appended to the instruction for providers that only
    support a generic JSON mode.
    """
    text = instruction
    if schema:
        text += "\n\nRespond with JSON matching this schema:\n" + json.dumps(schema)

    return HumanMessage(content=[
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{image_b64}"}},
    ])


def parse_json_content(message: BaseMessage) -> Dict[str, Any]:
    """
    Parse a chat model reply into a JSON object.

    Raises:
        ValueError: empty reply, invalid JSON or a non-object payload
    """
    content = message.content
    if isinstance(content, list):
        content = "".join(
            part.get("text", "") if isinstance(part, dict) else str(part)
            for part in content
        )

    text = (content or "").strip()
    if text.startswith("```"):
        first_newline = text.find("\n")
        closing = text.rfind("```")
        if first_newline != -1 and closing > first_newline:
            text = text[first_newline + 1:closing].strip()

    if not text:
        raise ValueError("Empty response from extraction provider")

    try:
        payload = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise ValueError(f"Response is not valid JSON: {e}")

    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


class BaseExtractionProvider(ABC):
    """
    Abstract base class for extraction providers.
    One capability: (image, instruction, schema) -> JSON object.
    """

    def __init__(
        self,
        model: str,
        temperature: float = 0.0,
        **kwargs
    ):
        self.model = model
        self.temperature = temperature

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name"""
        pass

    @abstractmethod
    async def extract_structured(
        self,
        image_b64: str,
        instruction: str,
        schema: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Submit an image for structured extraction.

        Args:
            image_b64: Base64-encoded JPEG bytes
            instruction: Natural-language extraction instruction
            schema: JSON schema the output must follow

        Returns:
            Parsed JSON object

        Raises:
            Exception: on transport or parse failure
        """
        pass

    def get_info(self) -> Dict[str, Any]:
        """Get provider information"""
        return {
            "provider": self.provider_name,
            "model": self.model,
            "temperature": self.temperature
        }


class OllamaVisionProvider(BaseExtractionProvider):
    """
    Ollama provider for local vision models.
    The schema is enforced through Ollama's structured output ``format``.
    """

    def __init__(
        self,
        model: str = "llama3.2-vision:latest",
        temperature: float = 0.0,
        base_url: str = "http://localhost:11434",
        num_ctx: int = 4096,
        **kwargs
    ):
        super().__init__(model=model, temperature=temperature, **kwargs)
        self.base_url = base_url
        self.num_ctx = num_ctx
        logger.info(f"OllamaVisionProvider initialized: model={model}, base_url={base_url}")

    @property
    def provider_name(self) -> str:
        return ExtractionProvider.OLLAMA.value

    def _create_llm(self, schema: Optional[Dict[str, Any]] = None) -> BaseChatModel:
        """Create ChatOllama instance"""
        return ChatOllama(
            model=self.model,
            temperature=self.temperature,
            base_url=self.base_url,
            num_ctx=self.num_ctx,
            format=schema or "json",
        )

    async def extract_structured(
        self,
        image_b64: str,
        instruction: str,
        schema: Dict[str, Any]
    ) -> Dict[str, Any]:
        llm = self._create_llm(schema)
        reply = await llm.ainvoke([build_vision_message(image_b64, instruction)])
        return parse_json_content(reply)


class GroqVisionProvider(BaseExtractionProvider):
    """
    Groq Cloud provider using the OpenAI-compatible API in JSON mode.
    """

    def __init__(
        self,
        model: str = "meta-llama/llama-4-scout-17b-16e-instruct",
        temperature: float = 0.0,
        api_key: Optional[str] = None,
        base_url: str = "https://api.groq.com/openai/v1",
        max_tokens: int = 1024,
        fallback_to_ollama: bool = False,
        ollama_config: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        super().__init__(model=model, temperature=temperature, **kwargs)

        if not api_key:
            raise ValueError("GROQ_API_KEY is required for Groq provider")

        self.api_key = api_key
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.fallback_to_ollama = fallback_to_ollama
        self.ollama_config = ollama_config or {}

        logger.info(f"GroqVisionProvider initialized: model={model}, base_url={base_url}")

    @property
    def provider_name(self) -> str:
        return ExtractionProvider.GROQ.value

    def _create_llm(self) -> BaseChatModel:
        """Create ChatOpenAI instance configured for Groq"""
        return ChatOpenAI(
            model=self.model,
            temperature=self.temperature,
            api_key=self.api_key,
            base_url=self.base_url,
            max_tokens=self.max_tokens,
            model_kwargs={"response_format": {"type": "json_object"}},
        )

    async def extract_structured(
        self,
        image_b64: str,
        instruction: str,
        schema: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Invoke Groq with optional fallback to Ollama on errors.

        Handles:
        - 401: Invalid API key
        - 429: Rate limit exceeded
        - Other connection errors
        """
        try:
            reply = await self._create_llm().ainvoke(
                [build_vision_message(image_b64, instruction, schema)]
            )
        except Exception as e:
            error_str = str(e).lower()

            is_auth_error = "401" in error_str or "unauthorized" in error_str or "invalid api key" in error_str
            is_rate_limit = "429" in error_str or "rate limit" in error_str or "too many requests" in error_str

            if is_auth_error:
                logger.error(f"Groq authentication error: {e}")
                error_msg = "Groq API key is invalid or expired"
            elif is_rate_limit:
                logger.warning(f"Groq rate limit exceeded: {e}")
                error_msg = "Groq rate limit exceeded"
            else:
                logger.error(f"Groq API error: {e}")
                error_msg = f"Groq API error: {str(e)}"

            if self.fallback_to_ollama and self.ollama_config:
                logger.info("Attempting fallback to Ollama...")
                try:
                    fallback = OllamaVisionProvider(**self.ollama_config)
                    return await fallback.extract_structured(image_b64, instruction, schema)
                except Exception as fallback_error:
                    logger.error(f"Ollama fallback also failed: {fallback_error}")
                    raise RuntimeError(
                        f"{error_msg}. Ollama fallback also failed: {str(fallback_error)}"
                    )

            raise RuntimeError(error_msg)

        return parse_json_content(reply)


class ProviderFactory:
    """
    Factory class for creating extraction providers from configuration.
    """

    @classmethod
    def create(
        cls,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        **kwargs
    ) -> BaseExtractionProvider:
        """
        Create an extraction provider.

        Args:
            provider: "ollama" or "groq". Defaults to EXTRACTION_PROVIDER
            model: Model name. Defaults to the provider-specific setting
            **kwargs: Additional provider-specific arguments

        Returns:
            BaseExtractionProvider instance
        """
        provider = (provider or extraction_config.EXTRACTION_PROVIDER).lower()

        logger.info(f"Creating extraction provider: provider={provider}, model={model}")

        if provider == ExtractionProvider.OLLAMA.value:
            return cls._create_ollama(model=model, **kwargs)
        elif provider == ExtractionProvider.GROQ.value:
            return cls._create_groq(model=model, **kwargs)
        else:
            raise ValueError(f"Unknown extraction provider: {provider}. Supported: ollama, groq")

    @classmethod
    def _ollama_config(cls, **kwargs) -> Dict[str, Any]:
        return {
            "model": kwargs.get("model") or extraction_config.OLLAMA_VISION_MODEL,
            "temperature": kwargs.get("temperature", extraction_config.TEMPERATURE),
            "base_url": kwargs.get("base_url", extraction_config.OLLAMA_BASE_URL),
            "num_ctx": kwargs.get("num_ctx", extraction_config.OLLAMA_NUM_CTX),
        }

    @classmethod
    def _create_ollama(cls, model: Optional[str] = None, **kwargs) -> OllamaVisionProvider:
        """Create Ollama provider instance"""
        return OllamaVisionProvider(**cls._ollama_config(model=model, **kwargs))

    @classmethod
    def _create_groq(cls, model: Optional[str] = None, **kwargs) -> GroqVisionProvider:
        """Create Groq provider instance"""
        api_key = kwargs.get("api_key", extraction_config.GROQ_API_KEY)
        if not api_key:
            raise ValueError(
                "GROQ_API_KEY environment variable is required for Groq provider. "
                "Set it in your .env file."
            )

        return GroqVisionProvider(
            model=model or extraction_config.GROQ_VISION_MODEL,
            temperature=kwargs.get("temperature", extraction_config.TEMPERATURE),
            api_key=api_key,
            base_url=kwargs.get("base_url", extraction_config.GROQ_BASE_URL),
            max_tokens=kwargs.get("max_tokens", extraction_config.GROQ_MAX_TOKENS),
            fallback_to_ollama=extraction_config.GROQ_FALLBACK_TO_OLLAMA,
            ollama_config=cls._ollama_config(),
        )
