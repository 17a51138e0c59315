"""Symptom catalog search with fuzzy spelling suggestions."""

import logging
from typing import List

from rapidfuzz import fuzz, process

from telecare.models.reference import ReferenceCondition
from telecare.tools.reference_dataset import ConditionCatalog

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_THRESHOLD = 60
DEFAULT_SUGGESTION_LIMIT = 5


def _vocabulary(catalog: ConditionCatalog) -> List[str]:
    seen = []
    for condition in catalog:
        for term in [condition.name, *condition.keywords]:
            term = term.lower()
            if term and term not in seen:
                seen.append(term)
    return seen


def search_catalog(query: str, catalog: ConditionCatalog) -> List[ReferenceCondition]:
    """Conditions whose name or any symptom keyword contains the query."""
    q = query.lower().strip()
    if not q:
        return []
    return [
        c
        for c in catalog
        if q in c.name.lower() or any(q in k.lower() for k in c.keywords)
    ]


def find_spell_suggestions(
    query: str,
    catalog: ConditionCatalog,
    threshold: int = DEFAULT_SUGGESTION_THRESHOLD,
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> List[str]:
    """Catalog terms that look like a misspelling of the query, best first."""
    q = query.lower().strip()
    if not q:
        return []
    results = process.extract(
        q, _vocabulary(catalog), scorer=fuzz.WRatio, limit=limit, score_cutoff=threshold
    )
    return [term for term, _score, _index in results if term != q]


def search_with_spell_check(query: str, catalog: ConditionCatalog) -> dict:
    """Direct matches, plus spelling suggestions when nothing matched directly."""
    matches = search_catalog(query, catalog)
    suggestions = [] if matches else find_spell_suggestions(query, catalog)
    logger.debug(f"Symptom search: {len(matches)} matches, {len(suggestions)} suggestions")
    return {
        "matches": matches,
        "spell_suggestions": suggestions,
        "has_spelling_suggestions": bool(suggestions),
        "original_query": query,
    }
