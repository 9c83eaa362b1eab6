from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TextIO

from bridgedl.app.cli import CMD_GENERATE, CMD_GRAPH, CMD_VALIDATE, parse_args
from bridgedl.config.bridge import Bridge
from bridgedl.config.file import load_bridge
from bridgedl.config.loader import load_settings
from bridgedl.config.validator import ConfigError, ToolSettings
from bridgedl.core.context import Context
from bridgedl.core.vertex import ComponentVertex
from bridgedl.diagnostics import Diagnostics, Severity, format_diagnostics
from bridgedl.encoding.serializer import Serializer
from bridgedl.graph.dot import marshal
from bridgedl.translation import ComponentRegistry, ComponentRegistryError, build_registry

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def run(
    argv: list[str] | None,
    *,
    registry: ComponentRegistry | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    # CLI entrypoint: parse args, load settings and plugins, dispatch the command.
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    args = parse_args(argv or [])

    try:
        settings = load_settings(Path(args.config) if args.config else None)
        configure_logging("DEBUG" if args.verbose else settings.log_level, err)
        if registry is None:
            registry = build_registry(settings.discovery_modules)
    except (ConfigError, ComponentRegistryError) as exc:
        err.write(f"Error: {exc}\n")
        return EXIT_FAILURE

    runner = _Runner(args, settings, registry, out, err)
    if args.command == CMD_GENERATE:
        return runner.generate()
    if args.command == CMD_VALIDATE:
        return runner.validate()
    if args.command == CMD_GRAPH:
        return runner.graph()
    raise ValueError(f"Unsupported command: {args.command}")


def configure_logging(level: str, stream: TextIO) -> None:
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s", stream=stream)
    logging.getLogger("bridgedl").setLevel(level)


class _Runner:
    def __init__(
        self,
        args: argparse.Namespace,
        settings: ToolSettings,
        registry: ComponentRegistry,
        out: TextIO,
        err: TextIO,
    ) -> None:
        self.args = args
        self.settings = settings
        self.registry = registry
        self.out = out
        self.err = err
        self.sources: dict[str, str] = {}

    def generate(self) -> int:
        bridge = self._load()
        if bridge is None:
            return EXIT_FAILURE
        manifests, diags = Context(bridge, self.registry).generate()
        if self._report(diags):
            return EXIT_FAILURE

        as_bridge = self.args.bridge if self.args.bridge is not None else self.settings.output.bridge
        use_yaml = self.args.yaml if self.args.yaml is not None else self.settings.output.format == "yaml"
        serializer = Serializer(bridge.identifier or self.settings.default_bridge_id)
        # Rendered completely before writing so that nothing is written on failure.
        text = serializer.render(manifests, bridge=as_bridge, fmt="yaml" if use_yaml else "json")
        self.out.write(text)
        return EXIT_OK

    def validate(self) -> int:
        bridge = self._load()
        if bridge is None:
            return EXIT_FAILURE
        _, diags = Context(bridge, self.registry).generate()
        if self._report(diags):
            return EXIT_FAILURE
        return EXIT_OK

    def graph(self) -> int:
        bridge = self._load()
        if bridge is None:
            return EXIT_FAILURE
        graph, diags = Context(bridge, self.registry).graph()
        if self._report(diags):
            return EXIT_FAILURE
        self.out.write(marshal(graph, label=ComponentVertex.label, key=ComponentVertex.sort_key))
        return EXIT_OK

    def _load(self) -> Bridge | None:
        bridge, diags = load_bridge(Path(self.args.file))
        if bridge is not None:
            self.sources[bridge.filename] = bridge.source
        if self._report(diags):
            return None
        return bridge

    def _report(self, diags: Diagnostics) -> bool:
        # Writes diagnostics to stderr; True when any of them is an error.
        if diags:
            self.err.write(format_diagnostics(diags, self.sources))
        errors = sum(1 for diag in diags if diag.severity is Severity.ERROR)
        if errors:
            logger.debug("%d error(s) reported", errors)
        return errors > 0
