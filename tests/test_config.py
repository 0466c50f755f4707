"""Tests for the configuration module."""

import os
import tempfile

import pytest
import yaml

from openvpnas_exporter.config import (
    DEFAULT_SOCKET_PATH,
    ExporterConfig,
    load_config,
)


def _write_yaml(data):
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        return fh.name


def test_load_config_defaults():
    """Loading from a non-existent file returns defaults."""
    cfg = load_config("/tmp/nonexistent_openvpnas_exporter.yaml")
    assert isinstance(cfg, ExporterConfig)
    assert cfg.mode == "serve"
    assert cfg.log_level == "INFO"
    assert cfg.rpc.socket_path == DEFAULT_SOCKET_PATH
    assert cfg.rpc.timeout == 10.0
    assert cfg.web.listen_address == "0.0.0.0"
    assert cfg.web.listen_port == 9176
    assert cfg.push.interval_seconds == 15.0
    assert cfg.otel.endpoint == "http://localhost:4318"


def test_load_config_from_yaml():
    """Loading from a YAML file populates values."""
    path = _write_yaml({
        "mode": "push",
        "log_level": "debug",
        "rpc": {"socket_path": "/run/sagent.sock", "timeout_seconds": 2.5},
        "web": {"listen_port": 9999},
        "push": {"interval_seconds": 30},
        "otel": {"endpoint": "http://otel:4318", "service_name": "vpn-gw"},
    })
    try:
        cfg = load_config(path)
        assert cfg.mode == "push"
        assert cfg.log_level == "DEBUG"
        assert cfg.rpc.socket_path == "/run/sagent.sock"
        assert cfg.rpc.timeout == 2.5
        assert cfg.web.listen_port == 9999
        assert cfg.web.listen_address == "0.0.0.0"
        assert cfg.push.interval_seconds == 30
        assert cfg.otel.service_name == "vpn-gw"
    finally:
        os.unlink(path)


def test_unknown_keys_are_ignored():
    path = _write_yaml({"rpc": {"socket_path": "/x", "retries": 3}, "surprise": True})
    try:
        cfg = load_config(path)
        assert cfg.rpc.socket_path == "/x"
    finally:
        os.unlink(path)


def test_zero_timeout_means_wait_forever():
    path = _write_yaml({"rpc": {"timeout_seconds": 0}})
    try:
        assert load_config(path).rpc.timeout is None
    finally:
        os.unlink(path)


def test_env_override(monkeypatch):
    """Environment variables override YAML values."""
    path = _write_yaml({"rpc": {"socket_path": "/from/yaml"}})
    try:
        monkeypatch.setenv("OPENVPNAS_EXPORTER_XMLRPC_PATH", "/from/env")
        monkeypatch.setenv("OPENVPNAS_EXPORTER_LISTEN_PORT", "9200")
        monkeypatch.setenv("OPENVPNAS_EXPORTER_RPC_TIMEOUT", "1.5")
        monkeypatch.setenv("OPENVPNAS_EXPORTER_MODE", "push")
        cfg = load_config(path)
        assert cfg.rpc.socket_path == "/from/env"
        assert cfg.web.listen_port == 9200
        assert cfg.rpc.timeout_seconds == 1.5
        assert cfg.mode == "push"
    finally:
        os.unlink(path)


def test_env_override_bad_number(monkeypatch):
    monkeypatch.setenv("OPENVPNAS_EXPORTER_LISTEN_PORT", "not-a-port")
    with pytest.raises(ValueError, match="OPENVPNAS_EXPORTER_LISTEN_PORT"):
        load_config("/tmp/nonexistent_openvpnas_exporter.yaml")
