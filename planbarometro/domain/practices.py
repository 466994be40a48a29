"""
Criteria matching for the best-practices repository.

A practice matches a criterion when one of its target criteria or tags
contains it (or is contained by it), when the criterion appears in its
title or description, or when the two terms are listed as related
(accent-free spellings and ES/EN equivalents).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol, TypeVar

RELATED_TERMS: dict[str, tuple[str, ...]] = {
    "coordinación": ("coordinacion", "coordination", "intersectorial", "institutional"),
    "coordinacion": ("coordinación", "coordination", "intersectorial", "institutional"),
    "coordination": ("coordinación", "coordinacion", "intersectorial", "institutional"),
    "planificación": ("planificacion", "planning", "plan", "estratégica", "estrategica"),
    "planificacion": ("planificación", "planning", "plan", "estratégica", "estrategica"),
    "planning": ("planificación", "planificacion", "plan", "estratégica", "estrategica"),
    "gestión": ("gestion", "management", "administración", "administracion"),
    "gestion": ("gestión", "management", "administración", "administracion"),
    "management": ("gestión", "gestion", "administración", "administracion"),
    "monitoreo": ("monitoring", "seguimiento", "evaluación", "evaluacion"),
    "monitoring": ("monitoreo", "seguimiento", "evaluación", "evaluacion"),
    "participación": ("participacion", "participation", "ciudadana", "ciudadano"),
    "participacion": ("participación", "participation", "ciudadana", "ciudadano"),
    "participation": ("participación", "participacion", "ciudadana", "ciudadano"),
    "innovación": ("innovacion", "innovation", "modernización", "modernizacion"),
    "innovacion": ("innovación", "innovation", "modernización", "modernizacion"),
    "innovation": ("innovación", "innovacion", "modernización", "modernizacion"),
    "transparencia": ("transparency", "accountabilidad", "accountability"),
    "transparency": ("transparencia", "accountabilidad", "accountability"),
    "eficiencia": ("efficiency", "efectividad", "effectiveness"),
    "efficiency": ("eficiencia", "efectividad", "effectiveness"),
}


class PracticeLike(Protocol):
    title: str
    description: str
    target_criteria: list[str]
    tags: list[str] | None


P = TypeVar("P", bound=PracticeLike)


def are_related_terms(term1: str, term2: str) -> bool:
    return term2 in RELATED_TERMS.get(term1, ()) or term1 in RELATED_TERMS.get(term2, ())


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


def matches_criterion(practice: PracticeLike, criterion: str) -> bool:
    needle = criterion.lower().strip()
    if not needle:
        return False

    for target in practice.target_criteria or ():
        candidate = target.lower().strip()
        if candidate and (_overlaps(needle, candidate) or are_related_terms(needle, candidate)):
            return True

    if needle in practice.title.lower() or needle in practice.description.lower():
        return True

    return any(tag.strip() and _overlaps(needle, tag.lower()) for tag in practice.tags or ())


def match_practices(practices: Iterable[P], criteria: Sequence[str]) -> list[P]:
    """Practices matching at least one of ``criteria``, in their original order."""
    return [p for p in practices if any(matches_criterion(p, c) for c in criteria)]
