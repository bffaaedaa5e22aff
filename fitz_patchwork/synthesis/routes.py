# fitz_patchwork/synthesis/routes.py
"""
Route set resolution: which features does a query ask for?

Quoted terms win whenever there are two or more of them. Otherwise
multi-feature list patterns are tried, then the single-feature deriver.
"""

import logging
import re

from .identifiers import (
    FALLBACK_IDENTIFIER,
    STOP_WORDS,
    camel_case,
    derive_route_name,
    kebab_case,
    quoted_terms,
)
from .types import FeatureRequest

logger = logging.getLogger(__name__)

_LIST_VERBS = (
    r"(?:track|store|save|manage|add|create|build|implement|support|show|display|"
    r"tables?\s+for|apis?\s+for|endpoints?\s+for|routes?\s+for|sections?\s+for|for)"
)
_WORD = r"(?!and\b)[\w'-]+"
_ITEM = rf"{_WORD}(?:\s+{_WORD}){{0,3}}"

# Ordered: comma lists first, then a plain "X and Y" pair.
_MULTI_FEATURE_PATTERNS = [
    re.compile(
        rf"\b{_LIST_VERBS}\s+(?P<items>{_ITEM}(?:\s*,\s*{_ITEM})+)"
        rf"(?:\s*,?\s+and\s+(?P<last>{_ITEM}))?\s*(?:[.;!?]|$)",
        re.IGNORECASE,
    ),
    re.compile(
        rf"\b{_LIST_VERBS}\s+(?P<items>{_ITEM}?)\s+and\s+(?P<last>{_ITEM})\s*(?:[.,;!?]|$)",
        re.IGNORECASE,
    ),
]

_MAX_ITEM_WORDS = 3


def feature_from_phrase(phrase: str) -> FeatureRequest:
    """Build a FeatureRequest whose symbol is the camelCase of its route."""
    route = kebab_case(phrase)
    return FeatureRequest(route_name=route, symbol_name=camel_case(route))


def _dedup(routes: list[str]) -> list[FeatureRequest]:
    seen: set[str] = set()
    features = []
    for route in routes:
        if route and route not in seen:
            seen.add(route)
            features.append(feature_from_phrase(route))
    return features


def _clean_item(item: str) -> str:
    words = [w for w in re.findall(r"[\w'-]+", item) if w.lower() not in STOP_WORDS]
    return kebab_case(" ".join(words[:_MAX_ITEM_WORDS]))


def _multi_feature_routes(query: str) -> list[str]:
    for pattern in _MULTI_FEATURE_PATTERNS:
        match = pattern.search(query)
        if not match:
            continue
        items = [part for part in match.group("items").split(",") if part.strip()]
        if match.group("last"):
            items.append(match.group("last"))
        routes = [_clean_item(item) for item in items]
        routes = [route for route in routes if route]
        if len(routes) >= 2:
            return routes
    return []


def resolve_route_set(query: str) -> list[FeatureRequest]:
    """
    Resolve the ordered, deduplicated features a query requests.

    Args:
        query: Full user query

    Returns:
        FeatureRequests in order of appearance; empty when nothing specific
        was asked for
    """
    quoted = quoted_terms(query)
    if len(quoted) >= 2:
        features = _dedup([kebab_case(term) for term in quoted])
        logger.info(f"Resolved {len(features)} quoted features")
        return features

    routes = _multi_feature_routes(query)
    if routes:
        features = _dedup(routes)
        logger.info(f"Resolved {len(features)} listed features")
        return features

    route = derive_route_name(query)
    if route == FALLBACK_IDENTIFIER:
        logger.info("No specific feature detected in query")
        return []
    return [feature_from_phrase(route)]
