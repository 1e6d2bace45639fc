from .listing import (
    DocumentKind,
    ErrorInfo,
    ExtractionResult,
    ItemCandidate,
    ItemRecord,
    RawDocument,
    StrategyName,
)
from .listing_request import ListingRequest, SourceMode
from .car import Car

__all__ = [
    'DocumentKind', 'ErrorInfo', 'ExtractionResult', 'ItemCandidate', 'ItemRecord',
    'RawDocument', 'StrategyName', 'ListingRequest', 'SourceMode', 'Car',
]
