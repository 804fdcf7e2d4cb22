"""kubemix command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``kubemix`` script).
"""

from kubemix.cli.main import cli

__all__ = ["cli"]
