import base64
import logging
from typing import Any, Dict, List, Optional, Union

import requests
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from app.core.config import settings
from app.core.exceptions import AIError, AIKillSwitchError

logger = logging.getLogger(__name__)

Content = Union[str, List[Dict[str, Any]]]


def text_block(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def image_block(data: bytes, media_type: str = "image/png") -> Dict[str, Any]:
    """Package raw image bytes as an inline data-URL content block."""
    encoded = base64.b64encode(data).decode("ascii")
    return {"type": "image_url", "image_url": {"url": f"data:{media_type};base64,{encoded}"}}


def call_completion(
    content: Content,
    max_tokens: Optional[int] = None,
    system: Optional[str] = None,
    temperature: Optional[float] = None,
) -> str:
    """
    Request a single completion from the configured chat-completions service.

    Args:
        content: Plain prompt text, or a list of text/image content blocks
        max_tokens: Token budget (defaults to settings)
        system: Optional system message
        temperature: Sampling temperature (defaults to settings)

    Returns:
        str: The completion text

    Raises:
        AIKillSwitchError: If external AI calls are disabled.
        AIError: If the key is missing, the call fails, or the reply has no text.
    """
    ai = settings.ai
    if ai.kill_switch:
        raise AIKillSwitchError()
    if not ai.openrouter_api_key:
        raise AIError("OPENROUTER_API_KEY is not configured. Set it in the environment.")

    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": content})

    payload = {
        "model": ai.model_name,
        "messages": messages,
        "max_tokens": max_tokens or ai.max_tokens,
        "temperature": ai.temperature if temperature is None else temperature,
    }
    headers = {
        "Authorization": f"Bearer {ai.openrouter_api_key}",
        "Content-Type": "application/json",
    }

    retrying = Retrying(
        stop=stop_after_attempt(ai.max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(AIError),
        reraise=True,
    )
    for attempt in retrying:
        with attempt:
            return _post(payload, headers)


def _post(payload: Dict[str, Any], headers: Dict[str, str]) -> str:
    logger.info(f"Calling AI Model: {payload['model']}")
    try:
        response = requests.post(
            settings.ai.base_url,
            json=payload,
            headers=headers,
            timeout=settings.ai.timeout_seconds,
        )
        response.raise_for_status()
    except requests.exceptions.Timeout:
        logger.error("AI service timeout.")
        raise AIError("AI service reached timeout limit.")
    except requests.exceptions.HTTPError as e:
        logger.error(f"AI service HTTP error: {e}")
        raise AIError(f"AI service returned error: {e.response.status_code}")
    except requests.exceptions.RequestException as e:
        logger.error(f"AI service unreachable: {e}")
        raise AIError(f"AI service error: {str(e)}")

    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise AIError(f"AI service returned an unexpected payload: {e}")

    if not isinstance(content, str) or not content.strip():
        raise AIError("AI service returned an empty completion.")
    return content
