"""
spaCy extension management utilities.

Provides functions to safely register custom extensions on Span objects.
"""

from spacy.tokens import Span


def ensure_candidates_extension() -> None:
    """Ensure the candidates extension is registered on Span."""
    if not Span.has_extension("candidates"):
        Span.set_extension("candidates", default=[])


def ensure_resolved_location_extension() -> None:
    """Ensure the resolved_location extension is registered on Span."""
    if not Span.has_extension("resolved_location"):
        Span.set_extension("resolved_location", default=None)
