"""Core transit search functionality."""

from .aggregator import TransitAggregator
from .client import ProviderClient, RawResponse
from .config import TransitSettings
from .exceptions import ProviderFailure, TransitSearchError
from .models import (
    Coordinate,
    SearchContext,
    SearchOutcome,
    StopKind,
    TransitStop,
    UnifiedResult,
)
from .normalizer import normalize

__all__ = [
    "Coordinate",
    "ProviderClient",
    "ProviderFailure",
    "RawResponse",
    "SearchContext",
    "SearchOutcome",
    "StopKind",
    "TransitAggregator",
    "TransitSearchError",
    "TransitSettings",
    "TransitStop",
    "UnifiedResult",
    "normalize",
]
