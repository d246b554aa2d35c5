"""Translation layer for the relay.

The relay treats translation as an opaque remote function with one promise:
it always gives back *some* text.  Failures degrade to the original message
rather than interrupting chat.

Package structure
-----------------
config.py   TranslationGatewayConfig  - frozen provider settings.
gateway.py  AzureTranslatorGateway    - async HTTP client for Azure
            PassThroughGateway          Translator; the pass-through variant
                                        is used when nothing is configured.

Use :func:`build_gateway` to pick the right one from settings.
"""

from __future__ import annotations

import logging

from polyglot_chat.translation.config import TranslationGatewayConfig
from polyglot_chat.translation.gateway import (
    AzureTranslatorGateway,
    PassThroughGateway,
    TranslationGateway,
)

logger = logging.getLogger(__name__)

__all__ = [
    "AzureTranslatorGateway",
    "PassThroughGateway",
    "TranslationGateway",
    "TranslationGatewayConfig",
    "build_gateway",
]


def build_gateway(config: TranslationGatewayConfig) -> AzureTranslatorGateway | PassThroughGateway:
    """Return the gateway selected by ``config``."""
    if config.is_usable:
        logger.info("Translation gateway: Azure Translator at %s", config.endpoint)
        return AzureTranslatorGateway(config)
    logger.warning("Translation gateway not configured; messages are relayed untranslated")
    return PassThroughGateway()
