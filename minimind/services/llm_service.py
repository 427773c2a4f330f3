from __future__ import annotations

import logging

from openai import OpenAI

from minimind.config import get_settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The language-model provider failed or is not configured."""


def get_openai_client() -> OpenAI:
    settings = get_settings()
    client_kwargs = {
        "api_key": settings.openai_api_key,
    }
    if settings.openai_base_url:
        client_kwargs["base_url"] = settings.openai_base_url
    return OpenAI(**client_kwargs)


def generate_text(prompt: str, temperature: float) -> str:
    """Send a single-turn prompt and return the raw completion text."""
    settings = get_settings()
    if not settings.openai_api_key:
        raise GenerationError(
            "OPENAI_API_KEY is not set. Add OPENAI_API_KEY=your_key to your .env file to enable generation."
        )
    client = get_openai_client()
    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
        )
        text = response.choices[0].message.content or ""
        logger.info("Generated completion (length: %d chars)", len(text))
        return text
    except Exception as e:
        logger.error("OpenAI API error: %s", e, exc_info=True)
        raise GenerationError(f"Failed to generate content: {e}") from e
