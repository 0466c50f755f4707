"""Configuration loading and validation for openvpnas_exporter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_SOCKET_PATH = "/usr/local/openvpn_as/etc/sock/sagent.localroot"
DEFAULT_CONFIG_FILE = "openvpnas_exporter.yaml"


@dataclass
class RpcConfig:
    """Access Server management socket settings."""

    socket_path: str = DEFAULT_SOCKET_PATH
    timeout_seconds: float = 10.0

    @property
    def timeout(self) -> float | None:
        """Socket deadline, or ``None`` to wait indefinitely."""
        if self.timeout_seconds <= 0:
            return None
        return float(self.timeout_seconds)


@dataclass
class WebConfig:
    """Prometheus exposition endpoint settings."""

    listen_address: str = "0.0.0.0"
    listen_port: int = 9176


@dataclass
class PushConfig:
    """Interval settings for push mode."""

    enabled: bool = True
    interval_seconds: float = 15.0


@dataclass
class OtelExporterConfig:
    """OpenTelemetry exporter settings."""

    endpoint: str = "http://localhost:4318"
    service_name: str = "openvpnas-exporter"
    headers: dict[str, str] = field(default_factory=dict)
    export_interval_ms: int = 10000


@dataclass
class ExporterConfig:
    """Top-level openvpnas_exporter configuration."""

    mode: str = "serve"
    log_level: str = "INFO"
    rpc: RpcConfig = field(default_factory=RpcConfig)
    web: WebConfig = field(default_factory=WebConfig)
    push: PushConfig = field(default_factory=PushConfig)
    otel: OtelExporterConfig = field(default_factory=OtelExporterConfig)


_ENV_MAP: dict[str, tuple[tuple[str, ...], type]] = {
    "OPENVPNAS_EXPORTER_MODE": (("mode",), str),
    "OPENVPNAS_EXPORTER_LOG_LEVEL": (("log_level",), str),
    "OPENVPNAS_EXPORTER_XMLRPC_PATH": (("rpc", "socket_path"), str),
    "OPENVPNAS_EXPORTER_RPC_TIMEOUT": (("rpc", "timeout_seconds"), float),
    "OPENVPNAS_EXPORTER_LISTEN_ADDRESS": (("web", "listen_address"), str),
    "OPENVPNAS_EXPORTER_LISTEN_PORT": (("web", "listen_port"), int),
    "OPENVPNAS_EXPORTER_PUSH_INTERVAL": (("push", "interval_seconds"), float),
    "OPENVPNAS_EXPORTER_OTEL_ENDPOINT": (("otel", "endpoint"), str),
    "OPENVPNAS_EXPORTER_OTEL_SERVICE_NAME": (("otel", "service_name"), str),
}


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides using the OPENVPNAS_EXPORTER_ prefix."""
    for env_key, (path, coerce) in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        obj = data
        for part in path[:-1]:
            if not isinstance(obj.get(part), dict):
                obj[part] = {}
            obj = obj[part]
        try:
            obj[path[-1]] = coerce(value)
        except ValueError as exc:
            raise ValueError(f"{env_key}={value!r}: {exc}") from exc
    return data


def _section(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        data = {}
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> ExporterConfig:
    """Convert a raw dictionary to an :class:`ExporterConfig`."""
    return ExporterConfig(
        mode=data.get("mode", "serve"),
        log_level=str(data.get("log_level", "INFO")).upper(),
        rpc=_section(RpcConfig, data.get("rpc")),
        web=_section(WebConfig, data.get("web")),
        push=_section(PushConfig, data.get("push")),
        otel=_section(OtelExporterConfig, data.get("otel")),
    )


def load_config(path: str | Path | None = None) -> ExporterConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``openvpnas_exporter.yaml`` in the current directory if *path*
    is None. A missing file yields the defaults.
    """
    data: dict[str, Any] = {}
    path = Path(DEFAULT_CONFIG_FILE) if path is None else Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
