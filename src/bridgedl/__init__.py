# Bridge Description Language interpreter.

__version__ = "0.1.0"
