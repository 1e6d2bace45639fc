# models/item_factory.py
from __future__ import annotations

from typing import Any, Mapping

from .listing import ItemCandidate, StrategyName


def candidate_from_mapping(data: Mapping[str, Any], strategy: StrategyName) -> ItemCandidate:
    """
    Build an :class:`models.listing.ItemCandidate` from a ``dict``-like object.

    Keys that are not candidate fields are dropped, so strategies can hand
    over whatever scratch mapping they assembled.

    Example
    -------
    >>> c = candidate_from_mapping({"title": " Volvo ", "extra": 1}, StrategyName.FEED)
    >>> c.title
    'Volvo'
    >>> c.link
    ''
    """
    allowed_keys = set(ItemCandidate.model_fields) - {"source_strategy"}
    filtered = {k: v for k, v in data.items() if k in allowed_keys}
    return ItemCandidate(source_strategy=strategy, **filtered)
