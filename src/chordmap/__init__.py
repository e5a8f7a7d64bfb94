"""Interactive chord bindings with live completion and persistent profiles."""

__all__ = [
    "adapters",
    "host",
    "keymaps",
    "persistence",
    "runtime",
    "session",
]

__version__ = "0.1.0"
