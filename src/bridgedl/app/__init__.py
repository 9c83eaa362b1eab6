from .cli import build_parser, parse_args
from .runtime import run

__all__ = ["build_parser", "parse_args", "run"]
