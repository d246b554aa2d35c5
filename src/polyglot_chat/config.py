"""
Relay configuration management.

This module handles loading and accessing relay configuration from multiple
sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized deployments
    2. Config file (config/server.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The
RelayConfig dataclass provides typed access to all settings.

Usage:
    from polyglot_chat.config import config

    print(config.server.port)
    print(config.relay.echo_to_sender)
    print(config.translation.endpoint)

Environment Variable Mapping:
    CHAT_HOST                     -> server.host
    CHAT_PORT                     -> server.port
    CHAT_ECHO_TO_SENDER           -> relay.echo_to_sender
    CHAT_TRANSLATION_ENABLED      -> translation.enabled
    AZURE_API_ENDPOINT            -> translation.endpoint
    AZURE_API_KEY                 -> translation.api_key
    AZURE_REGION                  -> translation.region
    CHAT_TRANSLATION_API_VERSION  -> translation.api_version
    CHAT_TRANSLATION_TIMEOUT      -> translation.timeout_seconds
    CHAT_LOG_LEVEL                -> logging.level
    CHAT_LOG_FORMAT               -> logging.format

The three ``AZURE_*`` names are the ones existing deployments of the relay
already export, so they are kept without the ``CHAT_`` prefix.
"""

import configparser
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "server.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "server.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ServerSettings:
    """Network server configuration."""

    host: str = "0.0.0.0"  # nosec B104 - intentional for server binding
    port: int = 8080


@dataclass
class RelaySettings:
    """Fan-out policy for chat messages."""

    # When True the sender also receives its own message as a delivery.
    echo_to_sender: bool = False


@dataclass
class TranslationSettings:
    """Translation provider configuration (Azure Translator)."""

    enabled: bool = True
    endpoint: str = ""
    api_key: str = ""
    region: str = ""
    api_version: str = "3.0"
    timeout_seconds: float = 10.0

    @property
    def is_configured(self) -> bool:
        """True when enough is set to call the provider."""
        return bool(self.enabled and self.endpoint and self.api_key)


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed", "json"] = "detailed"


@dataclass
class RelayConfig:
    """
    Complete relay configuration.

    This is the main configuration object that aggregates all settings sections.
    Access via the module-level `config` singleton.
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    relay: RelaySettings = field(default_factory=RelaySettings)
    translation: TranslationSettings = field(default_factory=TranslationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: RelayConfig) -> None:
    """Load configuration from parsed INI file into RelayConfig."""
    # Server section
    if parser.has_section("server"):
        if parser.has_option("server", "host"):
            cfg.server.host = parser.get("server", "host")
        if parser.has_option("server", "port"):
            cfg.server.port = parser.getint("server", "port")

    # Relay section
    if parser.has_section("relay"):
        if parser.has_option("relay", "echo_to_sender"):
            cfg.relay.echo_to_sender = _parse_bool(parser.get("relay", "echo_to_sender"))

    # Translation section
    if parser.has_section("translation"):
        if parser.has_option("translation", "enabled"):
            cfg.translation.enabled = _parse_bool(parser.get("translation", "enabled"))
        if parser.has_option("translation", "endpoint"):
            cfg.translation.endpoint = parser.get("translation", "endpoint").strip()
        if parser.has_option("translation", "api_key"):
            cfg.translation.api_key = parser.get("translation", "api_key").strip()
        if parser.has_option("translation", "region"):
            cfg.translation.region = parser.get("translation", "region").strip()
        if parser.has_option("translation", "api_version"):
            cfg.translation.api_version = parser.get("translation", "api_version").strip()
        if parser.has_option("translation", "timeout_seconds"):
            cfg.translation.timeout_seconds = parser.getfloat("translation", "timeout_seconds")

    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed", "json"):
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: RelayConfig) -> None:
    """Apply environment variable overrides to configuration."""
    # Server settings
    if env_host := os.getenv("CHAT_HOST"):
        cfg.server.host = env_host
    if env_port := os.getenv("CHAT_PORT"):
        cfg.server.port = int(env_port)

    # Relay settings
    if env_echo := os.getenv("CHAT_ECHO_TO_SENDER"):
        cfg.relay.echo_to_sender = _parse_bool(env_echo)

    # Translation settings
    if env_enabled := os.getenv("CHAT_TRANSLATION_ENABLED"):
        cfg.translation.enabled = _parse_bool(env_enabled)
    if env_endpoint := os.getenv("AZURE_API_ENDPOINT"):
        cfg.translation.endpoint = env_endpoint
    if env_key := os.getenv("AZURE_API_KEY"):
        cfg.translation.api_key = env_key
    if env_region := os.getenv("AZURE_REGION"):
        cfg.translation.region = env_region
    if env_version := os.getenv("CHAT_TRANSLATION_API_VERSION"):
        cfg.translation.api_version = env_version
    if env_timeout := os.getenv("CHAT_TRANSLATION_TIMEOUT"):
        cfg.translation.timeout_seconds = float(env_timeout)

    # Logging settings
    if env_log := os.getenv("CHAT_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()
    if env_format := os.getenv("CHAT_LOG_FORMAT"):
        if env_format.lower() in ("simple", "detailed", "json"):
            cfg.logging.format = env_format.lower()  # type: ignore[assignment]


def load_config() -> RelayConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/server.ini
        3. config/server.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        RelayConfig: Fully populated configuration object.
    """
    cfg = RelayConfig()

    # Determine which config file to use
    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        # Use example as fallback for development
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    # Environment variables win over any file
    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "RelayConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton. It does not touch an
    already-running relay, which captured its settings at startup.

    Returns:
        RelayConfig: The newly loaded configuration.
    """
    global config
    config = load_config()
    return config


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

# Load configuration once at module import time
config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    The API key itself is never included, only whether one is set.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "echo_to_sender": config.relay.echo_to_sender,
        "translation_enabled": config.translation.enabled,
        "translation_configured": config.translation.is_configured,
    }


def print_config_summary() -> None:
    """Print a summary of current configuration to stdout."""
    status = get_config_status()
    print("\n" + "=" * 60)
    print("RELAY CONFIGURATION")
    print("=" * 60)
    print(f"Config file: {status['config_file_path']}")
    print(f"File exists: {status['config_file_exists']}")
    if status["using_example"]:
        print("WARNING: Using example config (copy to server.ini for production)")
    print("-" * 60)
    print(f"Server:       {config.server.host}:{config.server.port}")
    print(f"Echo sender:  {config.relay.echo_to_sender}")
    print(f"Translation:  {'configured' if status['translation_configured'] else 'pass-through'}")
    print(f"Endpoint:     {config.translation.endpoint or '(not set)'}")
    print(f"Region:       {config.translation.region or '(not set)'}")
    print(f"Timeout:      {config.translation.timeout_seconds:.1f}s")
    print(f"Log level:    {config.logging.level}")
    print("=" * 60 + "\n")
