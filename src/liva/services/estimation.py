"""Nutrition estimation using LLMs."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from liva.domain.errors import EstimationError, MissingCredentialsError
from liva.domain.estimation import NutritionEstimate

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": {"type": "number", "description": "Totaal aantal calorieën"},
        "protein": {"type": "number", "description": "Gram eiwitten"},
        "carbs": {"type": "number", "description": "Gram koolhydraten"},
        "fat": {"type": "number", "description": "Gram vetten"},
        "reasoning": {"type": "string", "description": "Uitleg van de schatting"},
    },
    "required": ["calories", "protein", "carbs", "fat", "reasoning"],
    "additionalProperties": False,
}

ESTIMATE_SCHEMA_NAME = "nutrition_estimate"
FREEFORM_NAME_LENGTH = 30

_logger = logging.getLogger(__name__)


class EstimationClient(Protocol):
    """Interface for structured LLM estimation calls."""

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
        """Return data matching the named JSON schema."""


@dataclass
class EstimationService:
    """Builds estimation prompts and validates the results."""

    client: EstimationClient | None
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate_item(
        self, name: str, quantity: float, unit: str
    ) -> NutritionEstimate:
        """Estimate macros for a quantity of a single product."""
        prompt = (
            f'Schat de voedingswaarden voor {quantity:g} {unit} van "{name}". '
            "Geef realistische waarden voor calorieën (kcal), eiwitten (g), "
            "koolhydraten (g) en vetten (g). Geef ook een korte uitleg "
            "(reasoning) in het Nederlands waarom je deze waarden hebt gekozen."
        )
        return await self._estimate(prompt)

    async def estimate_freeform(self, description: str) -> NutritionEstimate:
        """Estimate total macros for a described meal or recipe."""
        prompt = (
            f'Analyseer dit recept of maaltijd: "{description}". '
            "Schat de totale voedingswaarden voor de hele portie zoals beschreven. "
            "Geef ook een korte uitleg in het Nederlands."
        )
        return await self._estimate(prompt)

    async def _estimate(self, prompt: str) -> NutritionEstimate:
        if self.client is None:
            raise MissingCredentialsError("No API key configured for estimation")
        try:
            raw = await self.client.estimate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                schema_name=ESTIMATE_SCHEMA_NAME,
                schema=ESTIMATE_SCHEMA,
                prompt=prompt,
            )
            return NutritionEstimate.model_validate(raw)
        except EstimationError:
            raise
        except (ValidationError, ValueError) as exc:
            _logger.warning("Estimation returned unusable data: %s", exc)
            raise EstimationError("Estimation returned unusable data") from exc


def freeform_log_name(description: str) -> str:
    """Derive a log entry name from a free-text meal description."""
    return description[:FREEFORM_NAME_LENGTH].strip() + "..."
