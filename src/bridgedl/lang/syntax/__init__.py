from .parser import HCL_LANGUAGE, parse_config

__all__ = ["HCL_LANGUAGE", "parse_config"]
