from __future__ import annotations

import argparse

CMD_GENERATE = "generate"
CMD_VALIDATE = "validate"
CMD_GRAPH = "graph"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bdl",
        description="Interpreter for the Bridge Description Language.",
    )
    parser.add_argument("--config", help="YAML settings file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug information to stderr")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    generate = commands.add_parser(
        CMD_GENERATE,
        help="Generate Kubernetes manifests for deploying a Bridge.",
        description="Generates the manifests which allow a Bridge to be deployed and writes them to standard output.",
    )
    generate.add_argument("file", metavar="FILE")
    # None means "not given": the settings file decides.
    generate.add_argument("--bridge", action="store_true", default=None, help="output a Bridge object instead of a List")
    generate.add_argument("--yaml", action="store_true", default=None, help="output manifests in YAML format")

    validate = commands.add_parser(
        CMD_VALIDATE,
        help="Validate a Bridge description.",
        description="Verifies that a Bridge is valid and can be generated. Exits with 0 on success, 1 otherwise.",
    )
    validate.add_argument("file", metavar="FILE")

    graph = commands.add_parser(
        CMD_GRAPH,
        help="Represent a Bridge as a directed graph in DOT format.",
        description="Generates a DOT representation of a Bridge and writes it to standard output.",
    )
    graph.add_argument("file", metavar="FILE")
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return build_parser().parse_args(argv)
