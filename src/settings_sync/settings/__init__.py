"""Working-copy settings: editable lists, deferred changes and the aggregator."""

from .deferred import CommitReport, DeferredChangeTracker, StagedChange
from .entries import (
    EnvironmentVariable,
    EnvironmentVariableMap,
    PermissionRule,
    PermissionRuleList,
)

__all__ = [
    "CommitReport",
    "DeferredChangeTracker",
    "EnvironmentVariable",
    "EnvironmentVariableMap",
    "PermissionRule",
    "PermissionRuleList",
    "StagedChange",
]
