"""Engine configuration for zipfence."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from zipfence._constants import (
    DEFAULT_CANDIDATE_MARGIN_MILES,
    DEFAULT_REQUEST_TIMEOUT,
    GEOMETRY_BASE_URL,
    MAX_RADIUS_MILES,
    REVERSE_GEOCODE_URL,
    USER_AGENT,
    ZIP_LOOKUP_URL,
)
from zipfence.exceptions import ZipFenceConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ZipFenceConfigError(f"{name} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class ZipFenceConfig:
    """Engine configuration.

    Parameters
    ----------
    geometry_base_url : str
        Base URL of the per-state ZIP geometry files.
    zip_lookup_url : str
        Base URL of the ZIP -> state lookup service.
    reverse_geocode_url : str
        Reverse geocoding endpoint used to find the state of a point.
    request_timeout : float
        Total timeout in seconds applied to every outbound request.
    max_radius_miles : float
        Upper bound the service radius is clamped to before persisting.
    candidate_margin_miles : float
        Safety margin added to the radius when choosing which states
        to fetch geometry for.
    geometry_cache_enabled : bool
        Keep fetched state geometry in memory for the lifetime of the
        client.  Nothing is written to disk.
    reverse_geocode_enabled : bool
        Resolve the current state over HTTP.  When disabled the built-in
        bounding-box table is used instead.
    user_agent : str
        ``User-Agent`` header sent with every request.
    """

    geometry_base_url: str = GEOMETRY_BASE_URL
    zip_lookup_url: str = ZIP_LOOKUP_URL
    reverse_geocode_url: str = REVERSE_GEOCODE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_radius_miles: float = MAX_RADIUS_MILES
    candidate_margin_miles: float = DEFAULT_CANDIDATE_MARGIN_MILES
    geometry_cache_enabled: bool = False
    reverse_geocode_enabled: bool = True
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ZipFenceConfigError("request_timeout must be positive")
        if self.max_radius_miles < 0:
            raise ZipFenceConfigError("max_radius_miles must not be negative")
        if self.candidate_margin_miles < 0:
            raise ZipFenceConfigError("candidate_margin_miles must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> ZipFenceConfig:
        """Create configuration from environment variables.

        Reads optional ``ZIPFENCE_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ZipFenceConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "ZIPFENCE_GEOMETRY_BASE_URL": "geometry_base_url",
            "ZIPFENCE_ZIP_LOOKUP_URL": "zip_lookup_url",
            "ZIPFENCE_REVERSE_GEOCODE_URL": "reverse_geocode_url",
            "ZIPFENCE_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_FLOAT_MAP = {
            "ZIPFENCE_REQUEST_TIMEOUT": "request_timeout",
            "ZIPFENCE_MAX_RADIUS_MILES": "max_radius_miles",
            "ZIPFENCE_CANDIDATE_MARGIN_MILES": "candidate_margin_miles",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "geometry_cache_enabled" not in overrides:
            config_kwargs["geometry_cache_enabled"] = _env_bool(env.get("ZIPFENCE_GEOMETRY_CACHE"), False)

        if "reverse_geocode_enabled" not in overrides:
            config_kwargs["reverse_geocode_enabled"] = _env_bool(env.get("ZIPFENCE_REVERSE_GEOCODE"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
