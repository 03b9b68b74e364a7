"""
Panel-side helpers: per-instance interaction state, legend clicks and the CLI.
"""

from panel import legend, state

__all__ = ["legend", "state"]
