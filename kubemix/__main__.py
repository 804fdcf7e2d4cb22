"""Entry point for `python -m kubemix`.

Usage:
    python -m kubemix --namespace default
    uv run python -m kubemix --format yaml
"""

from __future__ import annotations

from kubemix.cli import cli

cli()
