"""AI assistants for scope breakdown, address lookup and unit pricing."""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from openai import OpenAI

from .catalog import CATEGORIES, PAYMENT_TERMS, normalize_category, normalize_payment_term
from .config import AIConfig
from .models import LineItem, ProjectAddress, to_number

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_CODE_FENCE = re.compile(r"```(?:json)?")

SYSTEM_PROMPT = (
    "You are a senior residential construction estimator. Answer with JSON only, "
    "without commentary or Markdown."
)

SCOPE_PROMPT = """As a Senior Construction Estimator, perform a targeted analysis for a specific space: "{room}" in zip code "{zip}".

SPACE CONTEXT: This is for the {room}. Ignore other rooms unless they directly affect this space's scope.

SCOPE OF WORK INPUT:
"{scope}"

RULES FOR INTERPRETATION:
1. Categorize all work into these EXACT categories: {categories}.
2. For a {room}, prioritize typical requirements (e.g., wet area considerations for bathrooms, flooring for living rooms).
3. Estimate quantities and units realistically for a room of this type.
4. Provide specific descriptions for each line item that explain exactly what is being done in the {room}.
5. Return a JSON array of line items. Each item must have:
   - category: (Exact string from the list)
   - description: (Detailed task explanation for the client)
   - unit: (sq ft, ea, lft, allowance, etc.)
   - quantity: number
   - unitPrice: number (material cost)
   - laborRate: number (labor cost)
   - ecoProfit: 20
   - markup: 0
   - notes: string
   - paymentDue: (One of: {terms})

Return ONLY the JSON array. Ensure the interpretation is specific to the {room} only."""

ADDRESS_PROMPT = """Locate the specific physical address for: "{query}".

Return the address details strictly in this JSON format:
{{
  "street": "number and street name",
  "city": "city name",
  "state": "2-letter state code",
  "zip": "zip/postal code"
}}

Do not include any other text, just the JSON."""

PRICE_PROMPT = """Find current average contractor pricing for "{description}" ({category}) in zip code {zip}.

Return strictly in this JSON format:
{{
  "materialPrice": number,
  "laborPrice": number,
  "unit": "string",
  "reasoning": "string"
}}"""


@dataclass
class PriceSuggestion:
    material_price: float = 0.0
    labor_price: float = 0.0
    unit: str = "ea"
    reasoning: str = ""
    sources: List[str] = field(default_factory=list)


def _default_client_factory(api_key: str) -> Any:
    return OpenAI(api_key=api_key)


class _Assistant:
    """Shared plumbing: client creation, one request, text extraction."""

    def __init__(self, config: AIConfig, client_factory: Optional[ClientFactory] = None) -> None:
        self.config = config
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is not None:
            return self._client
        if not self.config.enabled:
            LOGGER.warning("AI assistance disabled in configuration")
            return None
        api_key = self.config.resolve_api_key()
        if not api_key:
            LOGGER.warning(
                "AI assistance enabled but API key unavailable; expected at %s or via %s",
                self.config.api_key_path,
                self.config.api_key_env,
            )
            return None
        try:
            self._client = self._client_factory(api_key)
        except Exception as exc:  # pragma: no cover
            LOGGER.error("Failed to initialise OpenAI client: %s", exc)
            return None
        return self._client

    def _request(self, prompt: str, *, model: Optional[str] = None) -> Any:
        client = self._get_client()
        if client is None:
            return None
        kwargs: dict = {
            "model": model or self.config.model,
            "input": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        if self.config.web_search:
            kwargs["tools"] = [{"type": "web_search_preview"}]
        return client.responses.create(**kwargs)

    @staticmethod
    def _extract_response_text(response: object) -> Optional[str]:
        text: Optional[str] = None
        if hasattr(response, "output_text"):
            text = getattr(response, "output_text")
        elif hasattr(response, "choices"):
            choices = getattr(response, "choices")
            if choices:
                choice = choices[0]
                if isinstance(choice, dict):
                    text = choice.get("message", {}).get("content")
                else:
                    message = getattr(choice, "message", None)
                    if message and isinstance(message, dict):
                        text = message.get("content")
                    elif message and hasattr(message, "content"):
                        text = message.content
        if isinstance(text, list):
            # Some models return a list of content parts
            text = "\n".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in text)
        return text.strip() if text else None

    @staticmethod
    def _extract_sources(response: object) -> List[str]:
        urls: List[str] = []
        for output in getattr(response, "output", None) or []:
            for part in getattr(output, "content", None) or []:
                for annotation in getattr(part, "annotations", None) or []:
                    url = getattr(annotation, "url", None)
                    if url and url not in urls:
                        urls.append(url)
        return urls


def _first_json_object(text: str) -> Optional[dict]:
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    data = json.loads(match.group(0))
    return data if isinstance(data, dict) else None


class ScopeAnalyzer(_Assistant):
    """Turns a room's free-text scope of work into proposed line items."""

    def analyze(self, scope_text: str, room_name: str, zip_code: str) -> List[LineItem]:
        if not scope_text or not scope_text.strip():
            return []
        prompt = SCOPE_PROMPT.format(
            room=room_name,
            zip=zip_code,
            scope=scope_text,
            categories=", ".join(CATEGORIES),
            terms=", ".join(PAYMENT_TERMS),
        )
        try:
            response = self._request(prompt, model=self.config.scope_model)
            if response is None:
                return []
            text = self._extract_response_text(response)
            if not text:
                return []
            payload = json.loads(_CODE_FENCE.sub("", text).strip())
        except Exception as exc:
            LOGGER.error("Scope analysis failed for %s: %s", room_name, exc)
            return []

        if not isinstance(payload, list):
            LOGGER.warning("Scope analysis for %s did not return a JSON array", room_name)
            return []

        items: List[LineItem] = []
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            item = LineItem.from_dict(entry)
            item.category = normalize_category(item.category)
            item.payment_due = normalize_payment_term(item.payment_due)
            items.append(item)
        LOGGER.info("Scope analysis proposed %d line items for %s", len(items), room_name)
        return items


class AddressResolver(_Assistant):
    """Resolves a free-text location into a structured postal address."""

    def resolve(self, query: str) -> Optional[ProjectAddress]:
        if not query or not query.strip():
            return None
        try:
            response = self._request(ADDRESS_PROMPT.format(query=query))
            if response is None:
                return None
            text = self._extract_response_text(response)
            if not text:
                return None
            data = _first_json_object(text)
        except Exception as exc:
            LOGGER.error("Address lookup failed for %r: %s", query, exc)
            return None
        if data is None:
            LOGGER.warning("Address lookup for %r returned no JSON object", query)
            return None
        return ProjectAddress.from_dict(
            {key: data.get(key) or "" for key in ("street", "city", "state", "zip")}
        )


class PriceAdvisor(_Assistant):
    """Suggests material and labor unit prices for a described task."""

    def estimate(self, description: str, zip_code: str, category: str) -> PriceSuggestion:
        prompt = PRICE_PROMPT.format(description=description, category=category, zip=zip_code)
        try:
            response = self._request(prompt)
            if response is None:
                return _pricing_error()
            text = self._extract_response_text(response)
            if not text:
                raise ValueError("No response")
            data = _first_json_object(text)
            if data is None:
                raise ValueError("Invalid JSON")
        except Exception as exc:
            LOGGER.error("Price lookup failed for %r: %s", description, exc)
            return _pricing_error()

        return PriceSuggestion(
            material_price=to_number(data.get("materialPrice")),
            labor_price=to_number(data.get("laborRate") or data.get("laborPrice")),
            unit=str(data.get("unit") or "ea"),
            reasoning=str(data.get("reasoning") or ""),
            sources=self._extract_sources(response),
        )


def _pricing_error() -> PriceSuggestion:
    return PriceSuggestion(reasoning="Pricing error.")


__all__ = ["AddressResolver", "PriceAdvisor", "PriceSuggestion", "ScopeAnalyzer"]
