"""dashdeck, a plugin-extensible web console."""

__version__ = "0.1.0"
