"""CLI interface for openvpnas_exporter."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time
from typing import TYPE_CHECKING

from . import __version__
from .config import ExporterConfig, load_config
from .rpc import RpcClient

if TYPE_CHECKING:
    from .collector.openvpnas import OpenVPNASCollector

logger = logging.getLogger(__name__)


def _build_collector(cfg: ExporterConfig) -> OpenVPNASCollector:
    from .collector.openvpnas import OpenVPNASCollector

    client = RpcClient(cfg.rpc.socket_path, timeout=cfg.rpc.timeout)
    return OpenVPNASCollector(client)


def _wait_for_signal() -> None:
    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)
    while not stop:
        time.sleep(0.5)


def _apply_overrides(cfg: ExporterConfig, args: argparse.Namespace) -> ExporterConfig:
    if getattr(args, "xmlrpc_path", None):
        cfg.rpc.socket_path = args.xmlrpc_path
    if getattr(args, "listen_address", None):
        cfg.web.listen_address = args.listen_address
    if getattr(args, "port", None) is not None:
        cfg.web.listen_port = args.port
    if getattr(args, "interval", None) is not None:
        cfg.push.interval_seconds = args.interval
    return cfg


def _cmd_serve(args: argparse.Namespace, cfg: ExporterConfig) -> None:
    """Serve metrics for Prometheus to scrape."""
    cfg = _apply_overrides(cfg, args)

    from .exporter.prometheus import serve

    serve(_build_collector(cfg), cfg.web)
    print(
        f"openvpnas_exporter listening on {cfg.web.listen_address}:{cfg.web.listen_port} "
        f"(socket={cfg.rpc.socket_path})"
    )
    print("Press Ctrl+C to stop.\n")
    _wait_for_signal()
    print("\nExporter stopped.")


def _cmd_push(args: argparse.Namespace, cfg: ExporterConfig) -> None:
    """Push metrics to an OTLP endpoint on an interval."""
    cfg = _apply_overrides(cfg, args)
    if not cfg.push.enabled:
        logger.warning("Push is disabled (push.enabled=false), nothing to do")
        return

    from .collector.manager import CycleManager
    from .exporter.otel import OtelExporter

    exporter = OtelExporter(cfg.otel)
    manager = CycleManager(_build_collector(cfg), cfg.push)
    manager.add_sink(exporter.export)

    manager.start()
    print(f"openvpnas_exporter pushing to {cfg.otel.endpoint} (interval={cfg.push.interval_seconds}s)")
    print("Press Ctrl+C to stop.\n")
    try:
        _wait_for_signal()
    finally:
        manager.stop()
        exporter.shutdown()
    print("\nPush stopped.")


def _cmd_probe(args: argparse.Namespace, cfg: ExporterConfig) -> None:
    """Run a single collection cycle and print the samples."""
    cfg = _apply_overrides(cfg, args)

    from .collector.base import ListSink

    sink = ListSink()
    up = _build_collector(cfg).collect_into(sink)

    if args.json:
        print(json.dumps(sink.to_dict(), indent=2))
    else:
        for sample in sink.samples:
            print(f"{sample.name} {sample.value:g}")

    if not up:
        sys.exit(1)


def _cmd_version(_args: argparse.Namespace, _cfg: ExporterConfig) -> None:
    print(f"openvpnas_exporter {__version__}")


# Command run when no subcommand is given, selected by the `mode` setting.
MODE_COMMANDS = {
    "serve": _cmd_serve,
    "push": _cmd_push,
}


def main(argv: list[str] | None = None) -> None:
    """Entry point for the openvpnas-exporter CLI."""
    parser = argparse.ArgumentParser(
        prog="openvpnas-exporter",
        description="Export OpenVPN Access Server metrics to Prometheus or OTLP",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to openvpnas_exporter.yaml")
    sub = parser.add_subparsers(dest="command")

    # serve
    serve_p = sub.add_parser("serve", help="Serve metrics over HTTP for Prometheus")
    serve_p.add_argument("--xmlrpc-path", default=None, help="Path of the Access Server XML-RPC socket")
    serve_p.add_argument("--listen-address", default=None, help="Address to listen on")
    serve_p.add_argument("--port", type=int, default=None, help="Port to listen on")
    serve_p.set_defaults(func=_cmd_serve)

    # push
    push_p = sub.add_parser("push", help="Push metrics to an OTLP/HTTP endpoint")
    push_p.add_argument("--xmlrpc-path", default=None, help="Path of the Access Server XML-RPC socket")
    push_p.add_argument("--interval", type=float, default=None, help="Seconds between collection cycles")
    push_p.set_defaults(func=_cmd_push)

    # probe
    probe_p = sub.add_parser("probe", help="Run one collection cycle and print the samples")
    probe_p.add_argument("--xmlrpc-path", default=None, help="Path of the Access Server XML-RPC socket")
    probe_p.add_argument("--json", action="store_true", help="Print samples as JSON")
    probe_p.set_defaults(func=_cmd_probe)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)
    cfg = load_config(args.config)
    func = getattr(args, "func", None) or MODE_COMMANDS.get(cfg.mode)
    if func is None:
        print(f"Unknown mode {cfg.mode!r}; expected one of {sorted(MODE_COMMANDS)}\n", file=sys.stderr)
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    func(args, cfg)


if __name__ == "__main__":
    main()
