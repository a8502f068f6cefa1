"""formlogic — conditional visibility and validation engine for dynamic forms."""

__version__ = "0.1.0"
