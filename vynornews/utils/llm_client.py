"""LLM client using LiteLLM.

Provides a single async interface over the providers LiteLLM supports
(Gemini by default for feed generation).
"""

import logging
from typing import Any, Optional

import litellm

# Suppress verbose LiteLLM logging
litellm.set_verbose = False
logging.getLogger("LiteLLM").setLevel(logging.WARNING)


async def get_completion_async(
    model: str,
    messages: list[dict],
    max_tokens: int = 4096,
    temperature: float = 0.3,
    response_format: Optional[dict] = None,
    api_key: Optional[str] = None,
) -> str:
    """
    Get a completion from any supported model via LiteLLM.

    Args:
        model: Model identifier, e.g. "gemini/gemini-3-flash-preview"
        messages: List of message dicts with role and content
        max_tokens: Maximum response tokens
        temperature: Sampling temperature
        response_format: Optional response format (e.g., {"type": "json_object"})
        api_key: Provider key; LiteLLM falls back to its environment lookup

    Returns:
        Response text content (empty string when the model returned none)

    Raises:
        Exception: If the API call fails
    """
    kwargs: dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }

    if response_format:
        kwargs["response_format"] = response_format
    if api_key:
        kwargs["api_key"] = api_key

    response = await litellm.acompletion(**kwargs)
    return response.choices[0].message.content or ""
