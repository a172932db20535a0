# utils/openai_client.py

import json
import logging
import re
from functools import lru_cache
from typing import Dict, List

from openai import AsyncAzureOpenAI, OpenAIError

from fitcoach.core.config import (
    CHAT_API_VERSION,
    CHAT_DEPLOYMENT_NAME,
    OPENAI_API_KEY,
    OPENAI_ENDPOINT,
    OPENAI_TIMEOUT,
)
from fitcoach.core.exceptions import GenerationError

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@lru_cache(maxsize=1)
def get_chat_client() -> AsyncAzureOpenAI:
    """Build the chat client on first use so importing the app needs no credentials."""
    try:
        return AsyncAzureOpenAI(
            api_key=OPENAI_API_KEY,
            azure_endpoint=OPENAI_ENDPOINT,
            api_version=CHAT_API_VERSION,
            timeout=OPENAI_TIMEOUT,
        )
    except (OpenAIError, ValueError) as e:
        raise GenerationError(f"Text generation is not configured: {e}") from e


def parse_json_text(text: str) -> dict:
    """Parse a model reply as a JSON object, tolerating a markdown code fence around it."""
    cleaned = _CODE_FENCE.sub("", (text or "").strip()).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise GenerationError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise GenerationError("Model returned JSON that is not an object")
    return parsed


async def generate_text(messages: List[Dict], temperature: float = 0.4, max_tokens: int = 1500) -> str:
    client = get_chat_client()
    try:
        response = await client.chat.completions.create(
            model=CHAT_DEPLOYMENT_NAME,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except OpenAIError as e:
        logger.error("Text generation failed: %s", e)
        raise GenerationError(f"Text generation failed: {e}") from e
    return response.choices[0].message.content or ""


async def generate_json(messages: List[Dict], temperature: float = 0.4) -> dict:
    """Ask for a JSON object and parse it once. No retries: a bad reply fails the request."""
    client = get_chat_client()
    try:
        response = await client.chat.completions.create(
            model=CHAT_DEPLOYMENT_NAME,
            messages=messages,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
    except OpenAIError as e:
        logger.error("JSON generation failed: %s", e)
        raise GenerationError(f"Text generation failed: {e}") from e
    return parse_json_text(response.choices[0].message.content)
