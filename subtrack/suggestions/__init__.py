"""Suggestion generation package."""

from subtrack.suggestions.generator import (
    CANCEL_REASON,
    REVIEW_REASON,
    SuggestionGenerator,
)

__all__ = ["CANCEL_REASON", "REVIEW_REASON", "SuggestionGenerator"]
