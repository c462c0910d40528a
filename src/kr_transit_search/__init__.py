"""Korean Transit Search Package

A Python package for searching Seoul bus stops and subway stations across
two public data providers, with CLI and MCP server capabilities.
"""

__version__ = "0.1.0"

from .core.aggregator import TransitAggregator
from .core.client import ProviderClient
from .core.models import Coordinate, StopKind, TransitStop, UnifiedResult

__all__ = [
    "Coordinate",
    "ProviderClient",
    "StopKind",
    "TransitAggregator",
    "TransitStop",
    "UnifiedResult",
]
