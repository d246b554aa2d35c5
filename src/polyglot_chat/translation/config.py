"""Translation gateway configuration.

``TranslationGatewayConfig`` is a frozen dataclass holding everything the
gateway needs to reach the provider.  It is built once at startup from the
``[translation]`` settings and never mutated at runtime.

Enablement
----------
The gateway talks to the provider only when ``enabled`` is ``True`` *and*
both ``endpoint`` and ``api_key`` are set.  In every other case
:func:`polyglot_chat.translation.build_gateway` hands out a pass-through
gateway, so the relay still works (untranslated) on a fresh checkout.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from polyglot_chat.config import TranslationSettings

_DEFAULT_API_VERSION = "3.0"
_DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class TranslationGatewayConfig:
    """Immutable configuration for the Azure Translator gateway.

    Attributes:
        enabled:          Master switch.  ``False`` selects the
                          pass-through gateway.
        endpoint:         Base URL of the Translator resource.  The
                          ``/translate`` path is appended automatically.
        api_key:          Value of the ``Ocp-Apim-Subscription-Key`` header.
        region:           Value of the ``Ocp-Apim-Subscription-Region``
                          header.  Empty for global resources.
        api_version:      Translator Text API version query parameter.
        timeout_seconds:  Upper bound on one translation call.  On expiry
                          the gateway returns the original text.
    """

    enabled: bool
    endpoint: str
    api_key: str
    region: str
    api_version: str
    timeout_seconds: float

    @property
    def translate_url(self) -> str:
        """Full ``/translate`` URL constructed from ``endpoint``."""
        return f"{self.endpoint.rstrip('/')}/translate"

    @property
    def is_usable(self) -> bool:
        """True when the provider can actually be called."""
        return self.enabled and bool(self.endpoint) and bool(self.api_key)

    @classmethod
    def from_dict(cls, data: dict) -> TranslationGatewayConfig:
        """Parse a plain dict of gateway settings.

        Missing fields fall back to the same defaults as :meth:`disabled`,
        except ``enabled`` which defaults to ``True`` so a dict carrying only
        credentials is enough.  A blank ``api_version`` also falls back.
        """
        return cls(
            enabled=bool(data.get("enabled", True)),
            endpoint=str(data.get("endpoint", "")),
            api_key=str(data.get("api_key", "")),
            region=str(data.get("region", "")),
            api_version=str(data.get("api_version") or _DEFAULT_API_VERSION),
            timeout_seconds=float(data.get("timeout_seconds", _DEFAULT_TIMEOUT_SECONDS)),
        )

    @classmethod
    def from_settings(cls, settings: TranslationSettings) -> TranslationGatewayConfig:
        """Freeze the ``[translation]`` section of the relay config."""
        return cls.from_dict(asdict(settings))

    @classmethod
    def disabled(cls) -> TranslationGatewayConfig:
        """Return a config that selects the pass-through gateway."""
        return cls(
            enabled=False,
            endpoint="",
            api_key="",
            region="",
            api_version=_DEFAULT_API_VERSION,
            timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        )
