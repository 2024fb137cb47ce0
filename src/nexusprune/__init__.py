"""Keep the latest release of Maven artifacts in Nexus, delete the rest."""

from __future__ import annotations

from .client import DeleteOutcome, NexusClient, NexusError, SearchResult, parse_search_response
from .config import NexusEndpoint, RetentionSettings
from .coordinates import Gav
from .groups import GroupSourceError, read_groups, resolve_groups
from .retention import RetentionDriver, RunOutcome, RunReport, RunState
from .shuffle import shuffle
from .stats import arithmetic_mean, median

__all__ = [
    "DeleteOutcome",
    "Gav",
    "GroupSourceError",
    "NexusClient",
    "NexusEndpoint",
    "NexusError",
    "RetentionDriver",
    "RetentionSettings",
    "RunOutcome",
    "RunReport",
    "RunState",
    "SearchResult",
    "arithmetic_mean",
    "median",
    "parse_search_response",
    "read_groups",
    "resolve_groups",
    "shuffle",
]
