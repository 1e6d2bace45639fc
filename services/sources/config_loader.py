# services/sources/config_loader.py
"""
Loads the per-site extraction profiles from ``configs/sources.yaml`` and
validates them with Pydantic models.  The file can contain a top-level
``sources`` key or just the mapping of source names -> profile dictionaries.

Public API:
* ``get_source_profile(name)`` - returns a validated ``SourceProfile`` or
  raises ``SourceNotFoundError``.
* ``list_available_sources()`` - convenience helper for the CLI.
"""

import re
from pathlib import Path
from typing import Dict, List, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ----------------------------------------------------------------------
# Pydantic schemas
# ----------------------------------------------------------------------
class SourceProfile(BaseModel):
    """
    Everything the strategies and the fetch gateway know about one site.

    The defaults describe FINN, so a bare ``SourceProfile()`` is usable.
    """

    model_config = ConfigDict(frozen=True)

    origin: str = "https://www.finn.no"
    search_url: str = "https://www.finn.no/mobility/search/car?orgId={org_id}"
    api_url: str = "https://cache.api.finn.no/iad/search/car-norway?orgId={org_id}"
    api_key_header: str = "x-FINN-apikey"
    item_link_template: str = "https://www.finn.no/car/used/ad.html?finnkode={id}"
    listing_url_patterns: Tuple[str, ...] = (
        r"/car/used/ad\.html\?finnkode=\d+",
        r"/mobility/item/\d+",
    )
    docs_paths: Tuple[Tuple[str, ...], ...] = (("docs",), ("data", "docs"))
    app_state_script_ids: Tuple[str, ...] = ("__NEXT_DATA__",)
    title_selectors: Tuple[str, ...] = ('[data-testid="object-card-title"]', "h3, h2")
    price_selectors: Tuple[str, ...] = ('[data-testid="price"]',)
    currency: str = "kr"
    untitled_placeholder: str = "Uten tittel"
    link_only_title: str = "Se annonse"

    @field_validator("origin")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("listing_url_patterns")
    @classmethod
    def _validate_regex(cls, patterns: Tuple[str, ...]) -> Tuple[str, ...]:
        """Ensure every listing pattern is a valid regular expression."""
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid regex pattern '{pattern}': {exc}") from exc
        return patterns

    @property
    def listing_regex(self) -> "re.Pattern[str] | None":
        """All listing patterns folded into one alternation."""
        if not self.listing_url_patterns:
            return None
        return re.compile("|".join(f"(?:{p})" for p in self.listing_url_patterns))


class AllSources(BaseModel):
    """Top-level container - maps source name -> its profile."""
    sources: Dict[str, SourceProfile]


# ----------------------------------------------------------------------
# Internal helpers & caching
# ----------------------------------------------------------------------
# Resolve the path relative to this file (two levels up -> project root)
CONFIG_PATH = (
    Path(__file__).resolve().parents[2] / "configs" / "sources.yaml"
)

# Simple in-process cache so the YAML is read/validated only once per process
_cached_all: AllSources | None = None


def _load_yaml() -> dict:
    """Read the YAML file and return the inner ``sources`` mapping."""
    with CONFIG_PATH.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
        return raw.get("sources", raw)


def _load_all() -> AllSources:
    """
    Parse the entire YAML, validate it against ``AllSources`` and cache the
    result.  Any validation problem raises ``pydantic.ValidationError``.
    """
    global _cached_all
    if _cached_all is None:
        _cached_all = AllSources(sources=_load_yaml())
    return _cached_all


# ----------------------------------------------------------------------
# Custom exception for a missing source
# ----------------------------------------------------------------------
class SourceNotFoundError(KeyError):
    """Raised when a requested source does not exist in sources.yaml."""

    def __init__(self, source_name: str):
        super().__init__(f"Source '{source_name}' not found.")
        self.source_name = source_name


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------
def get_source_profile(source_name: str) -> SourceProfile:
    """
    Return a **validated** ``SourceProfile`` for the requested source.

    Raises
    ------
    SourceNotFoundError
        If the source name is not present in the YAML.
    pydantic.ValidationError
        If the YAML exists but does not conform to the schema.
    """
    all_cfg = _load_all()
    try:
        return all_cfg.sources[source_name]
    except KeyError as exc:
        raise SourceNotFoundError(source_name) from exc


def list_available_sources() -> List[str]:
    return list(_load_all().sources.keys())
