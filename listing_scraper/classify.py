"""Optional industry classification through the OpenAI chat completions API."""

import json

import httpx
import structlog

from listing_scraper import config
from listing_scraper.models import IndustryClassification

logger = structlog.get_logger(__name__)

INDUSTRIES = (
    "Technology", "Healthcare", "Retail", "Manufacturing", "Food & Beverage",
    "Professional Services", "Construction", "Transportation", "Real Estate",
    "Education", "Finance", "Entertainment", "Agriculture", "Other",
)

SYSTEM_PROMPT = (
    "You are an industry classification expert. Classify businesses into these standard categories:\n"
    + ", ".join(INDUSTRIES) + ".\n\n"
    'Return ONLY a JSON object with "industry" and "confidence" (0.0-1.0).'
)


def fallback_classification() -> IndustryClassification:
    return IndustryClassification(industry="Other", confidence=0.1)


class ClassificationError(Exception):
    """Exception for classification API errors."""
    pass


class FallbackClassifier:
    """Used when no API key is configured."""

    async def classify(self, description: str) -> IndustryClassification:
        return fallback_classification()


class OpenAIClassifier:
    def __init__(
        self,
        api_key: str,
        model: str = config.OPENAI_MODEL,
        api_url: str = config.OPENAI_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._transport = transport

    async def _request(self, description: str) -> IndustryClassification:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f'Classify this business: "{description}"'},
            ],
            "temperature": 0.1,
            "max_tokens": 100,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            response = await client.post(self._api_url, json=payload, headers=headers)

        if not response.is_success:
            raise ClassificationError(f"OpenAI API error: {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
            if not content:
                raise ClassificationError("Empty completion")
            result = json.loads(content)
            return IndustryClassification(
                industry=result.get("industry") or "Other",
                confidence=float(result.get("confidence") or 0.5),
            )
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise ClassificationError(f"Unparseable completion: {e}") from e

    async def classify(self, description: str) -> IndustryClassification:
        """Classify, falling back to Other/0.1 on any API or parse failure."""
        try:
            return await self._request(description)
        except (ClassificationError, httpx.HTTPError) as e:
            logger.warning("Industry classification error", error=str(e))
            return fallback_classification()


def get_classifier(api_key: str | None = None):
    key = config.OPENAI_API_KEY if api_key is None else api_key
    if key:
        return OpenAIClassifier(key)
    return FallbackClassifier()
