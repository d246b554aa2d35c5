"""Translation gateways.

A gateway turns ``(text, from_lang, to_lang)`` into translated text.  The
relay calls one gateway per recipient of every chat message, concurrently,
so gateways hold no per-call state.

Caller contract
---------------
``translate()`` always returns a string:

- the original text unchanged when ``from_lang == to_lang``;
- the provider's translation on success;
- the original text on any failure (timeout, connection error, non-2xx
  status, unexpected response shape).

Nothing is raised to the caller.  A provider outage therefore degrades the
relay to "no translation" instead of breaking chat.

Async
-----
The relay runs on a single asyncio loop and the provider call is its only
suspension point, so the Azure gateway uses ``httpx.AsyncClient``.  One
client can be shared for connection pooling (the FastAPI app does this for
its lifetime); without one, each call opens a short-lived client.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import httpx

from polyglot_chat.translation.config import TranslationGatewayConfig

logger = logging.getLogger(__name__)


class TranslationGateway(Protocol):
    """Anything with an async ``translate`` honouring the caller contract."""

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str: ...


class PassThroughGateway:
    """Gateway used when no provider is configured: returns text unchanged."""

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        return text

    async def open(self) -> None:
        return None

    async def aclose(self) -> None:
        return None


class AzureTranslatorGateway:
    """Gateway backed by the Azure Translator Text API (v3.0).

    Request shape::

        POST {endpoint}/translate?api-version=3.0&from=en&to=fr
        Ocp-Apim-Subscription-Key: <key>
        Ocp-Apim-Subscription-Region: <region>
        Content-Type: application/json

        [{"text": "hello"}]

    The translation is read from ``[0].translations[0].text``.

    Attributes:
        _config:  Frozen gateway settings.
        _client:  Optional shared ``httpx.AsyncClient``.  Not owned unless
                  created by :meth:`open`.
    """

    def __init__(
        self,
        config: TranslationGatewayConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client
        self._owns_client = False

    # ── Client lifecycle ──────────────────────────────────────────────────────

    async def open(self) -> None:
        """Create a pooled client for this gateway if none was injected."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeout_seconds)
            self._owns_client = True

    async def aclose(self) -> None:
        """Close the pooled client if this gateway created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            self._owns_client = False

    # ── Primary method ────────────────────────────────────────────────────────

    async def translate(self, text: str, from_lang: str, to_lang: str) -> str:
        """Translate ``text``; return the original text on any failure."""
        if from_lang == to_lang:
            return text

        try:
            return await asyncio.wait_for(
                self._request(text, from_lang, to_lang),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Translation timed out after %.1fs (%s -> %s)",
                self._config.timeout_seconds,
                from_lang,
                to_lang,
            )
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Translation API error: %s %s",
                exc.response.status_code,
                exc.response.text,
            )
        except httpx.TimeoutException:
            logger.warning("Translation request timed out (%s -> %s)", from_lang, to_lang)
        except httpx.RequestError as exc:
            logger.error("Translation request failed: %s", exc)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Invalid response from translation API: %s", exc)
        return text

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _build_request(self, text: str, from_lang: str, to_lang: str) -> dict:
        """Keyword arguments for ``AsyncClient.post``."""
        headers = {
            "Ocp-Apim-Subscription-Key": self._config.api_key,
            "Content-Type": "application/json",
        }
        if self._config.region:
            headers["Ocp-Apim-Subscription-Region"] = self._config.region
        return {
            "headers": headers,
            "params": {
                "api-version": self._config.api_version,
                "from": from_lang,
                "to": to_lang,
            },
            "json": [{"text": text}],
        }

    async def _request(self, text: str, from_lang: str, to_lang: str) -> str:
        logger.debug("Translating from %s to %s", from_lang, to_lang)
        kwargs = self._build_request(text, from_lang, to_lang)
        if self._client is not None:
            response = await self._client.post(self._config.translate_url, **kwargs)
        else:
            async with httpx.AsyncClient(timeout=self._config.timeout_seconds) as client:
                response = await client.post(self._config.translate_url, **kwargs)
        response.raise_for_status()
        return _extract_translation(response.json())


def _extract_translation(data) -> str:
    """Pull the first translation out of a Translator response body.

    Raises:
        ValueError: The body does not carry a translation.
    """
    translated = data[0]["translations"][0]["text"]
    if not isinstance(translated, str):
        raise ValueError(f"translation text is {type(translated).__name__}, not str")
    return translated
