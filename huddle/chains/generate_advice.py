"""Generate fantasy advice text from an assembled prompt."""

from __future__ import annotations

from anthropic import AsyncAnthropic

from huddle.core.config import get_settings
from huddle.core.errors import GenerationError
from huddle.core.logging import get_logger

logger = get_logger(__name__)


def _get_client() -> AsyncAnthropic:
    settings = get_settings()
    return AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)


async def generate_advice(prompt: str) -> str:
    """
    Send the prompt to the generation model and return its text.

    Args:
        prompt: Fully rendered advice prompt

    Returns:
        Advice text

    Raises:
        GenerationError: If the provider call fails or returns no text
    """
    settings = get_settings()

    try:
        response = await _get_client().messages.create(
            model=settings.ADVICE_MODEL,
            max_tokens=settings.ADVICE_MAX_TOKENS,
            temperature=settings.ADVICE_TEMPERATURE,
            messages=[{"role": "user", "content": prompt}],
        )
    except Exception as e:
        logger.error(f"Advice generation failed: {e}")
        raise GenerationError(f"Advice generation failed: {e}") from e

    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    ).strip()
    if not text:
        raise GenerationError("Advice generation returned no text")

    logger.info(
        "Generated advice",
        extra={
            "model": settings.ADVICE_MODEL,
            "tokens_input": response.usage.input_tokens,
            "tokens_output": response.usage.output_tokens,
        },
    )
    return text
