"""OpenAI Responses API client for nutrition estimates."""

import json
import logging
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from liva.domain.errors import EstimationError, MissingCredentialsError
from liva.services.estimation import EstimationClient

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIEstimationClient(EstimationClient):
    """Estimation client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIEstimationClient":
        """Create an OpenAI estimation client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def estimate(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema_name: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Ask for a strict JSON answer to a text-only estimation prompt."""
        options: dict[str, object] = {"store": store}
        if reasoning_effort:
            options["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(
                model=model,
                input=prompt,
                text={
                    "format": {
                        "type": "json_schema",
                        "name": schema_name,
                        "strict": True,
                        "schema": schema,
                    }
                },
                **options,
            )
        except openai.AuthenticationError as exc:
            raise MissingCredentialsError("OpenAI rejected the API key") from exc
        except openai.OpenAIError as exc:
            _logger.warning("OpenAI estimation request failed: %s", exc)
            raise EstimationError("AI estimation failed") from exc

        if not response.output_text:
            raise EstimationError(f"OpenAI returned no {schema_name} output")
        try:
            return json.loads(response.output_text)
        except json.JSONDecodeError as exc:
            raise EstimationError(f"OpenAI returned invalid {schema_name} JSON") from exc

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
