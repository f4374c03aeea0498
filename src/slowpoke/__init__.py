"""slowpoke: test duration analysis for JSON test runner event logs."""

__version__ = "0.1.0"
