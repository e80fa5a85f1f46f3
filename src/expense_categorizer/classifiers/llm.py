import os
from dataclasses import dataclass

from openai import APIStatusError, OpenAI, OpenAIError

from expense_categorizer.core import settings
from expense_categorizer.core.errors import ServiceError
from expense_categorizer.domain.prompts import SYSTEM_INSTRUCTIONS
from expense_categorizer.logger import get_logger

from .base import Classifier

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassifierConfig:
    model: str = settings.DEFAULT_OPENAI_MODEL
    temperature: float = settings.DEFAULT_OPENAI_TEMPERATURE
    max_output_tokens: int = settings.DEFAULT_OPENAI_MAX_OUTPUT_TOKENS

    @classmethod
    def from_env(cls) -> "ClassifierConfig":
        return cls(
            model=os.getenv("OPENAI_MODEL") or settings.DEFAULT_OPENAI_MODEL,
            temperature=settings.get_env_float(
                "OPENAI_TEMPERATURE", settings.DEFAULT_OPENAI_TEMPERATURE, min_value=0.0, max_value=2.0
            ),
            max_output_tokens=settings.get_env_int(
                "OPENAI_MAX_OUTPUT_TOKENS", settings.DEFAULT_OPENAI_MAX_OUTPUT_TOKENS, min_value=1
            ),
        )


class LLMClassifier(Classifier):
    def __init__(
        self,
        api_key: str | None = None,
        config: ClassifierConfig | None = None,
        base_url: str | None = None,
    ):
        self.client = OpenAI(
            api_key=api_key or os.getenv("OPENAI_API_KEY"),
            base_url=base_url or os.getenv("OPENAI_BASE_URL") or None,
            max_retries=0,
        )
        self.config = config or ClassifierConfig()

    def complete(self, prompt: str) -> str:
        logger.info(
            "[LLM] Calling model=%s temperature=%.2f max_output_tokens=%d.",
            self.config.model,
            self.config.temperature,
            self.config.max_output_tokens,
        )
        try:
            response = self.client.responses.create(
                model=self.config.model,
                instructions=SYSTEM_INSTRUCTIONS,
                input=prompt,
                temperature=self.config.temperature,
                max_output_tokens=self.config.max_output_tokens,
            )
        except APIStatusError as e:
            logger.error("[LLM] API error (%s): %s", e.status_code, e.message)
            raise ServiceError(f"Language model API error: {e.message} ({e.status_code})", e.status_code) from e
        except OpenAIError as e:
            logger.error("[LLM] Request failed: %s", e)
            raise ServiceError(f"Language model request failed: {e}") from e

        text = self._extract_output_text(response)
        if not text or not text.strip():
            logger.error("[LLM] Response contained no text.")
            raise ServiceError("Language model returned no content")

        logger.info("[LLM] Response received, length: %d.", len(text))
        return text

    @staticmethod
    def _extract_output_text(response: object) -> str | None:
        output_text = getattr(response, "output_text", None)
        if output_text:
            return output_text

        output = getattr(response, "output", None)
        if not output:
            return None

        parts: list[str] = []
        for item in output:
            content = getattr(item, "content", None)
            if not content:
                continue
            for block in content:
                block_type = getattr(block, "type", None)
                if block_type in {"output_text", "text"}:
                    text = getattr(block, "text", None)
                    if text:
                        parts.append(text)

        if parts:
            return "".join(parts)
        return None
