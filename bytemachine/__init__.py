"""A stack-based byte-code virtual machine with an assembler and a debugger."""

__version__ = "0.1.0"

__all__ = ["__version__"]