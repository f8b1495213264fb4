from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You read Japanese car auction sheets from an image. "
    "Translate to English and return ONLY JSON per schema. Do not invent values."
)
USER_PROMPT = "Extract details from this auction sheet and output ONLY JSON."

SHEET_JSON_SCHEMA: dict[str, Any] = {
    "name": "auction_sheet_extraction",
    "strict": True,
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "make": {"type": "string"},
            "model": {"type": "string"},
            "year": {"type": "integer", "minimum": 1970, "maximum": 2100},
            "auction_grade": {"type": "string"},
            "interior_grade": {"type": "string"},
            "exterior_grade": {"type": "string"},
            "mileage_km": {"type": "integer", "minimum": 0},
            "notes": {"type": "string"},
        },
        "required": ["make", "model"],
    },
}


class VisionError(Exception):
    """Base class for failures of the vision provider, never of the scoring engine."""


class VisionNotConfigured(VisionError):
    pass


class VisionProviderError(VisionError):
    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.detail = detail


class InvalidUpstreamPayload(VisionError):
    pass


class VisionClient:
    """Async client for an OpenAI-compatible chat-completions endpoint.

    Asks the model to read the sheet photo and answer with JSON matching
    SHEET_JSON_SCHEMA. The returned mapping is loosely typed on purpose:
    the normalizer coerces it.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key.strip()
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "VisionClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            model=settings.VISION_MODEL,
            temperature=settings.VISION_TEMPERATURE,
            timeout=settings.VISION_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, image_url: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            "response_format": {"type": "json_schema", "json_schema": SHEET_JSON_SCHEMA},
            "temperature": self.temperature,
        }

    async def extract_sheet(self, image_url: str) -> dict[str, Any]:
        if not self.enabled:
            raise VisionNotConfigured("Missing OPENAI_API_KEY")

        url = f"{self.base_url}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json=self.build_payload(image_url), headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Vision request failed: %s", exc)
            raise VisionProviderError("Vision provider unavailable", detail=str(exc)) from exc

        if resp.status_code >= 400:
            logger.warning("Vision provider returned %s", resp.status_code)
            raise VisionProviderError("Vision provider error", detail=resp.text)

        try:
            body = resp.json()
        except ValueError as exc:
            raise InvalidUpstreamPayload("Vision provider returned non-JSON body") from exc

        return parse_completion(body)


def parse_completion(body: Any) -> dict[str, Any]:
    """Pull the extraction mapping out of a chat-completion body.

    A body without choices is an upstream contract violation. Message
    content that is not a JSON object degrades to an empty extraction.
    """
    if not isinstance(body, dict) or not isinstance(body.get("choices"), list):
        raise InvalidUpstreamPayload("Vision provider response has no choices")

    choices = body["choices"]
    message = choices[0].get("message") if choices and isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not content:
        return {}

    try:
        extracted = json.loads(content)
    except (TypeError, ValueError):
        logger.warning("Vision content is not valid JSON; scoring an empty extraction")
        return {}
    if not isinstance(extracted, dict):
        return {}
    return extracted
