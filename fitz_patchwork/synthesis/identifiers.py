# fitz_patchwork/synthesis/identifiers.py
"""
Identifier derivation from natural-language feature requests.

derive_phrase() picks the words that name a feature; kebab_case() and
camel_case() turn those words into a route name and a table symbol.
Both conversions are pure and idempotent.
"""

import logging
import re

logger = logging.getLogger(__name__)

FALLBACK_IDENTIFIER = "items"
MULTI_QUOTE_IDENTIFIER = "collections"

# A quote only opens at a word boundary, so "don't" and "user's" are not quotes.
_QUOTED_RE = re.compile(r"(?<![\w])[\"'‘“`]([^\"'‘’“”`\n]+?)[\"'’”`](?![\w])")

_SYMBOL_FROM_QUERY_RE = re.compile(r"\.from\(\s*([A-Za-z_$][\w$]*)\s*\)")
_SYMBOL_FROM_IMPORT_RE = re.compile(
    r"import\s*\{\s*([A-Za-z_$][\w$]*)[^}]*\}\s*from\s*['\"][^'\"]*schema[^'\"]*['\"]"
)

# Ordered: the first pattern that matches names the feature.
_EXTRACTION_PATTERNS = [
    re.compile(
        r"\b(?:create|add|make|build|set up)\s+(?:a|an|the)?\s*(?:new\s+)?"
        r"(?:table|schema|model|collection|api|endpoint)s?\s+(?:for|of|to store)\s+"
        r"(?P<phrase>[\w\s'-]+?)\s*(?:[.,;!?]|\bwith\b|\bthat\b|$)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?:store|save|track|manage|keep track of|log|record|persist)\s+"
        r"(?P<phrase>[\w\s'-]+?)\s*(?:[.,;!?]|\b(?:in|into|inside|to|for|with|on|from|using|so)\b|$)",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(?P<phrase>[\w\s'-]+?)\s+(?:management|tracking)\s+(?:system|feature|page)\b",
        re.IGNORECASE,
    ),
]

CONNECTIVE_WORDS = frozenset({
    "a", "an", "the", "my", "our", "your", "their", "his", "her", "its",
    "of", "for", "and", "or", "with", "to", "in", "on", "all", "some",
    "any", "each", "every", "user", "users", "user's", "new",
    "i", "we", "want", "need", "build", "create", "add", "make", "implement",
    "simple", "basic",
})

STOP_WORDS = CONNECTIVE_WORDS | frozenset({
    "you", "me", "us", "wants", "would", "like", "needs", "please", "can",
    "could", "should", "let", "lets", "let's",
    "be", "is", "are", "it", "this", "that", "these", "those", "so",
    "store", "save", "track", "manage", "show", "display", "list", "get",
    "fetch", "support",
    "feature", "features", "table", "tables", "database", "db", "data",
    "api", "apis", "endpoint", "endpoints", "route", "routes", "page",
    "section", "system", "app", "application", "also", "just", "then",
    "from", "into", "using", "use",
})

_MAX_PATTERN_WORDS = 3
_MAX_FALLBACK_WORDS = 2


def kebab_case(text: str) -> str:
    """Lower-case, drop punctuation, join words with single hyphens."""
    lowered = text.lower().replace("_", " ")
    stripped = re.sub(r"[^a-z0-9\s-]", "", lowered)
    return re.sub(r"[\s-]+", "-", stripped).strip("-")


def camel_case(text: str) -> str:
    """Join words, capitalizing each after the first; first character lower-cased."""
    spaced = re.sub(r"[\s_-]+", " ", text)
    stripped = re.sub(r"[^A-Za-z0-9 ]", "", spaced).strip()
    joined = re.sub(r" +([A-Za-z0-9])", lambda m: m.group(1).upper(), stripped)
    return joined[:1].lower() + joined[1:]


def pascal_case(text: str) -> str:
    camel = camel_case(text)
    return camel[:1].upper() + camel[1:]


def split_identifier(identifier: str) -> str:
    """'topTracks' -> 'top Tracks', so kebab_case() yields 'top-tracks'."""
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", identifier)


def quoted_terms(text: str) -> list[str]:
    """Quoted substrings in order of appearance, blanks dropped."""
    return [m.group(1).strip() for m in _QUOTED_RE.finditer(text) if m.group(1).strip()]


def _clean_words(phrase: str, drop: frozenset[str]) -> list[str]:
    words = re.findall(r"[A-Za-z0-9']+", phrase)
    return [w for w in words if w.lower() not in drop]


def identifier_from_code(code: str) -> str | None:
    """Table symbol a code sample queries or imports from the schema."""
    for pattern in (_SYMBOL_FROM_QUERY_RE, _SYMBOL_FROM_IMPORT_RE):
        match = pattern.search(code)
        if match:
            return match.group(1)
    return None


def derive_phrase(phrase: str, code: str | None = None) -> str:
    """
    Derive the words that name the feature a phrase asks for.

    Rules, first success wins:
    1. A symbol referenced by the code sample (queried or imported from the schema)
    2. Exactly one quoted substring, case-folded with punctuation removed
    3. Several quoted substrings: "collections"
    4. The first matching extraction pattern, connectives removed, capped at 3 words
    5. Up to 2 content words of the phrase after stop-word removal
    6. "items"

    Args:
        phrase: Query text or a quoted sub-phrase
        code: Optional code sample the identifier may be read from

    Returns:
        Space- or camel-separated words, ready for kebab_case()/camel_case()
    """
    if code:
        symbol = identifier_from_code(code)
        if symbol:
            return split_identifier(symbol)

    quoted = quoted_terms(phrase)
    if len(quoted) == 1:
        return re.sub(r"[^a-z0-9\s]", "", quoted[0].casefold()).strip()
    if len(quoted) > 1:
        return MULTI_QUOTE_IDENTIFIER

    for pattern in _EXTRACTION_PATTERNS:
        match = pattern.search(phrase)
        if not match:
            continue
        words = _clean_words(match.group("phrase"), CONNECTIVE_WORDS)
        if words:
            logger.debug(f"Pattern {pattern.pattern[:40]!r} matched: {words}")
            return " ".join(words[:_MAX_PATTERN_WORDS])

    words = _clean_words(phrase, STOP_WORDS)
    if words:
        return " ".join(words[:_MAX_FALLBACK_WORDS])

    return FALLBACK_IDENTIFIER


def derive_route_name(phrase: str, code: str | None = None) -> str:
    return kebab_case(derive_phrase(phrase, code)) or FALLBACK_IDENTIFIER


def derive_symbol_name(phrase: str, code: str | None = None) -> str:
    return camel_case(derive_phrase(phrase, code)) or FALLBACK_IDENTIFIER
