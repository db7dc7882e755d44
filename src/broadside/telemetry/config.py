"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field

from broadside.config import bool_from_env

from .logger import init_logging
from .metrics import init_metrics
from .tracer import init_tracing

_SIGNALS = {
    # signal: (enable field, endpoint field, path suffix)
    "TRACES": ("enable_tracing", "otlp_traces_endpoint", "v1/traces"),
    "METRICS": ("enable_metrics", "otlp_metrics_endpoint", "v1/metrics"),
    "LOGS": ("enable_logging", "otlp_logs_endpoint", "v1/logs"),
}
_BROADSIDE_FLAGS = {"TRACES": "TRACING", "METRICS": "METRICS", "LOGS": "LOGGING"}


def _signal_endpoint(signal: str, base: str | None, suffix: str) -> str | None:
    explicit = os.getenv(f"OTEL_EXPORTER_OTLP_{signal}_ENDPOINT")
    if explicit:
        return explicit
    if not base:
        return None
    return f"{base.rstrip('/')}/{suffix}"


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    """Parse ``key=value,key=value``; entries without ``=`` are skipped."""
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        key, sep, value = part.partition("=")
        if sep:
            attrs[key.strip()] = value.strip()
    return attrs


class TelemetryConfig(BaseModel):
    """Runtime configuration for telemetry exporters."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    metrics_export_interval_ms: int = Field(default=5000, gt=0)
    service_name: str = "broadside"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Construct config from env vars (`BROADSIDE_*` + `OTEL_*`).

        Explicit ``overrides`` take precedence over endpoint variables. A
        signal with an endpoint is switched on even if its flag is off.
        """

        data: Dict[str, Any] = cls().model_dump()
        data.update(overrides)
        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")

        for signal, (flag_field, endpoint_field, suffix) in _SIGNALS.items():
            enabled = bool_from_env(
                f"BROADSIDE_ENABLE_{_BROADSIDE_FLAGS[signal]}", f"OTEL_{signal}_ENABLED"
            )
            if enabled is not None:
                data[flag_field] = enabled
            if data.get(endpoint_field) is None:
                data[endpoint_field] = _signal_endpoint(signal, base_endpoint, suffix)
            if data[endpoint_field]:
                data[flag_field] = True

        interval = os.getenv("OTEL_METRIC_EXPORT_INTERVAL")
        if interval and interval.strip():
            data["metrics_export_interval_ms"] = interval.strip()

        data["service_name"] = os.getenv("OTEL_SERVICE_NAME") or data["service_name"]
        data["service_namespace"] = os.getenv("OTEL_SERVICE_NAMESPACE") or data["service_namespace"]

        resource_env = os.getenv("OTEL_RESOURCE_ATTRIBUTES")
        if resource_env:
            data["resource_attributes"] = {
                **data.get("resource_attributes", {}),
                **_parse_resource_attributes(resource_env),
            }

        return cls(**data)

    def resource_attributes_with_service(self) -> dict[str, str]:
        """Resource attributes shared by every exporter."""
        return {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
            **self.resource_attributes,
        }


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Initialise telemetry subsystems according to the config flags."""

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
