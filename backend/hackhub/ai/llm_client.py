import json
import logging
import re
from typing import TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from hackhub.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)
_WHOLE_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*([\s\S]*?)\s*```\s*$")


class LLMNotConfiguredError(RuntimeError):
    pass


class EmptyCompletionError(ValueError):
    pass


def strip_code_fences(text: str) -> str:
    if not text:
        return ""
    match = _WHOLE_FENCE_RE.match(text)
    return match.group(1).strip() if match else text.strip()


def first_json_span(text: str) -> str | None:
    """Return the first balanced JSON object or array found in ``text``."""
    positions = [(text.find(ch), ch) for ch in "{[" if text.find(ch) != -1]
    if not positions:
        return None
    start, opener = min(positions)
    closer = "}" if opener == "{" else "]"

    depth = 0
    in_string = escaped = False
    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return text[start : idx + 1]
    return None


def json_candidates(raw_text: str) -> list[str]:
    """Strings worth trying ``json.loads`` on, most likely first, without duplicates."""
    text = (raw_text or "").strip()
    if not text:
        return []

    found: list[str | None] = []
    fenced = _FENCE_RE.findall(text)
    if fenced:
        found.append(fenced[0])
    found.extend([text, first_json_span(text)])
    # Some models prefix the payload with a bare "json" token
    if text.lower().startswith("json"):
        trimmed = text[4:].lstrip(": \n\r\t")
        found.extend([trimmed, first_json_span(trimmed)])

    candidates: list[str] = []
    for candidate in found:
        candidate = (candidate or "").strip()
        if candidate and candidate not in candidates:
            candidates.append(candidate)
    return candidates


class LLMClient:
    """Thin wrapper over an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT
        resolved_api_key = api_key or settings.LLM_API_KEY
        if not resolved_api_key:
            raise LLMNotConfiguredError("LLM_API_KEY is not configured")

        self.client = AsyncOpenAI(
            base_url=base_url or settings.LLM_BASE_URL,
            api_key=resolved_api_key,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    def _sampling_kwargs(self, temperature: float | None) -> dict:
        # gpt-5 models only accept the default temperature
        if temperature is None or self.model_name.lower().startswith("gpt-5"):
            return {}
        return {"temperature": temperature}

    async def _complete(self, system_prompt: str, user_prompt: str, temperature: float | None) -> str:
        response = await self.client.chat.completions.create(
            model=self.model_name,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            **self._sampling_kwargs(temperature),
        )
        if not getattr(response, "choices", None):
            logger.error("Model %s returned no choices: %s", self.model_name, response)
            raise ValueError(f"Provider {self.model_name} returned no output")
        return response.choices[0].message.content or ""

    async def generate_structured(
        self, system_prompt: str, user_prompt: str, response_schema: type[T]
    ) -> T:
        """
        Ask the model for JSON matching ``response_schema`` and validate it.

        The schema is appended to the system prompt. A response that cannot be
        parsed is retried once with stricter instructions at temperature 0.
        """
        schema_json = json.dumps(response_schema.model_json_schema())
        schema_prompt = (
            f"{system_prompt}\n\n"
            "Respond with ONLY valid JSON matching the JSON Schema below. "
            "No markdown fences and no text around the JSON.\n\n"
            f"SCHEMA:\n{schema_json}"
        )
        attempts = [
            (schema_prompt, 0.7),
            (
                f"{schema_prompt}\n\nYour previous answer could not be parsed. "
                "Return a single JSON document matching the schema and nothing else.",
                0,
            ),
        ]

        errors: list[str] = []
        for attempt, (prompt, temperature) in enumerate(attempts, start=1):
            logger.info(
                "Structured request to %s (attempt %s/%s)", self.model_name, attempt, len(attempts)
            )
            text = await self._complete(prompt, user_prompt, temperature)
            errors = []
            for candidate in json_candidates(text):
                try:
                    return response_schema.model_validate(json.loads(candidate, strict=False))
                except (json.JSONDecodeError, ValidationError) as exc:
                    errors.append(str(exc))
            if attempt < len(attempts):
                logger.warning(
                    "Could not parse structured output from %s, retrying: %s",
                    self.model_name,
                    " | ".join(errors[:2]) or "empty response",
                )

        logger.error("Giving up on structured output from %s", self.model_name)
        raise ValueError(
            "Unable to parse structured response: " + (" | ".join(errors[:3]) or "empty response")
        )

    async def generate_text(self, system_prompt: str, user_prompt: str, *, temperature: float = 0.7) -> str:
        """Plain-text completion with surrounding code fences removed."""
        text = strip_code_fences(await self._complete(system_prompt, user_prompt, temperature))
        if not text:
            raise EmptyCompletionError(f"Model {self.model_name} returned empty content")
        logger.info("Received %s characters from %s", len(text), self.model_name)
        return text
