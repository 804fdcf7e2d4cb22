"""kubectl adapter: process invocation, argument builders and kind names."""

from kubemix.kubectl.client import KubectlClient
from kubemix.kubectl.kinds import KIND_ALIASES, normalize_kind, parse_name_listing

__all__ = [
    "KIND_ALIASES",
    "KubectlClient",
    "normalize_kind",
    "parse_name_listing",
]
