"""
phonecheck/providers — external reputation sources and the adapters that
combine them.
"""

from phonecheck.providers.base import ReputationProvider
from phonecheck.providers.external import ExternalAggregateAdapter
from phonecheck.providers.numverify import NumVerifyProvider
from phonecheck.providers.reputation import ReputationHeuristicAdapter
from phonecheck.providers.scamalert import CommunityScamProvider

__all__ = [
    "CommunityScamProvider",
    "ExternalAggregateAdapter",
    "NumVerifyProvider",
    "ReputationHeuristicAdapter",
    "ReputationProvider",
]
