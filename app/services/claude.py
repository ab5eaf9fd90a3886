import json
import logging
import re

from anthropic import AsyncAnthropic

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"

_FENCE_RE = re.compile(r"```(?:json)?\s*")


class ClaudeService:
    def __init__(self, api_key: str, model: str = MODEL):
        self._client = AsyncAnthropic(api_key=api_key)
        self._model = model

    async def analyze(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.4,
        max_tokens: int = 2048,
    ) -> dict | None:
        """Return the response parsed as a JSON object, or None on any failure."""
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
            text = response.content[0].text
        except Exception:
            logger.exception("Claude API call failed")
            return None

        parsed = self._try_parse_json(text)
        if parsed is None:
            logger.warning("Claude response is not a JSON object: %.200s", text)
        return parsed

    @staticmethod
    def _try_parse_json(text: str) -> dict | None:
        if not text:
            return None

        # Strip markdown fences
        stripped = _FENCE_RE.sub("", text).strip().rstrip("`").strip()

        try:
            obj = json.loads(stripped)
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass

        # Fallback: outermost braces, which also covers nested objects
        start, end = stripped.find("{"), stripped.rfind("}")
        if start != -1 and end > start:
            try:
                obj = json.loads(stripped[start:end + 1])
                if isinstance(obj, dict):
                    return obj
            except (json.JSONDecodeError, ValueError):
                pass

        return None
