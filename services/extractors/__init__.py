from .base import ExtractionStrategy
from .normalizers import (
    absolutize,
    best_image_from_srcset,
    extract_price_from_free_text,
    format_price,
)
from .orchestrator import build_strategies, dedupe_candidates, run_extraction

__all__ = [
    'ExtractionStrategy', 'absolutize', 'best_image_from_srcset',
    'extract_price_from_free_text', 'format_price', 'build_strategies',
    'dedupe_candidates', 'run_extraction',
]
