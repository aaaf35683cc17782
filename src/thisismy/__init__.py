"""
thisismy: aggregate files and URLs into one text stream, with gitignore-aware
resolution and an interactive watch mode.
"""

from thisismy.errors import FetchError, ResolutionError, ThisismyError
from thisismy.fetch import ContentFetcher
from thisismy.resolver import IgnorePolicy, ResolverConfig, ResourceSelector, select_resources
from thisismy.watch import ConfirmationGate, Decision, WatchSession

__all__ = [
    "ConfirmationGate",
    "ContentFetcher",
    "Decision",
    "FetchError",
    "IgnorePolicy",
    "ResolutionError",
    "ResolverConfig",
    "ResourceSelector",
    "ThisismyError",
    "WatchSession",
    "select_resources",
]
