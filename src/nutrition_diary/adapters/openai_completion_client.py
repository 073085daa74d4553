"""OpenAI Responses API client for structured nutrition answers."""

import json
from dataclasses import dataclass

from openai import APIError, AsyncOpenAI

from nutrition_diary.domain.errors import OracleResponseError, OracleUnavailableError
from nutrition_diary.services.oracle import StructuredCompletionClient


@dataclass
class OpenAICompletionClient(StructuredCompletionClient):
    """Structured completion client backed by OpenAI Responses API."""

    client: AsyncOpenAI | None

    @classmethod
    def create(cls, api_key: str | None) -> "OpenAICompletionClient":
        """Create a client; without a key every call is unavailable."""
        if not api_key:
            return cls(client=None)
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with structured outputs."""
        if self.client is None:
            raise OracleUnavailableError("OpenAI API key not set")
        request_payload: dict[str, object] = {
            "model": model,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except APIError as exc:
            raise OracleUnavailableError(f"OpenAI request failed: {exc}") from exc
        output_text = response.output_text
        if not output_text:
            raise OracleResponseError("OpenAI returned an empty response")
        try:
            return json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise OracleResponseError("OpenAI returned invalid JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self.client is not None:
            await self.client.close()
