"""Provider settings and the secret data source."""

from __future__ import annotations

import hashlib
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

log = logging.getLogger(__name__)

DEFAULT_AWS_PROFILE = "default"
DEFAULT_TABLE = "credential-store"
REGION_ENV_VARS = ("AWS_REGION", "AWS_DEFAULT_REGION")


class ConfigError(Exception):
    """Raised when provider or data source settings are incomplete."""


class _SecretClient(Protocol):
    def get_secret(
        self, name: str, table: str, version: str, context: Mapping[str, str]
    ) -> str: ...


@dataclass(frozen=True)
class ProviderConfig:
    """Settings used to connect to AWS and locate the secrets table."""

    region: str
    table: str = DEFAULT_TABLE
    profile: str = DEFAULT_AWS_PROFILE

    @property
    def uses_named_profile(self) -> bool:
        """True when a non-default profile from the shared config is requested."""
        return self.profile != DEFAULT_AWS_PROFILE


@dataclass(frozen=True)
class SecretData:
    """The result of reading a secret: its identifier and value."""

    id: str
    value: str


def resolve_provider_config(
    settings: Mapping[str, Any], environ: Mapping[str, str] | None = None
) -> ProviderConfig:
    """Build provider settings, taking the region from the environment when not given."""
    env = os.environ if environ is None else environ
    region = settings.get("region")
    if region is None:
        region = next((env[var] for var in REGION_ENV_VARS if env.get(var)), None)
    if not region:
        raise ConfigError('"region": required field is not set')

    table = settings.get("table")
    profile = settings.get("profile")
    config = ProviderConfig(
        region=str(region),
        table=DEFAULT_TABLE if table is None else str(table),
        profile=DEFAULT_AWS_PROFILE if profile is None else str(profile),
    )
    log.debug("configured credstash for table %s", config.table)
    return config


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def read_secret(client: _SecretClient, settings: Mapping[str, Any]) -> SecretData:
    """Read the secret described by ``settings`` through ``client``."""
    name = settings.get("name")
    if not name:
        raise ConfigError('"name": required field is not set')
    version = settings.get("version") or ""
    table = settings.get("table") or ""
    context = {
        str(key): _format_value(value)
        for key, value in (settings.get("context") or {}).items()
    }

    log.debug(
        "Getting secret for name=%r table=%r version=%r context=%r",
        name, table, version, context,
    )
    value = client.get_secret(name, table, version, context)
    return SecretData(id=hash_value(value), value=value)


def hash_value(value: str) -> str:
    """Return the hex SHA-256 digest of a string."""
    return hashlib.sha256(value.encode("utf-8", errors="surrogateescape")).hexdigest()