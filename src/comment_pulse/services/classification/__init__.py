# src/comment_pulse/services/classification/__init__.py
"""
Rule-based classification tiers: rules, refinement, fallback, enrichment.
"""
from .rules import heuristic_classify, is_spam
from .refinement import refine_neutral
from .fallback import classify_category, fallback_classify, fallback_sentiment
from .enrichment import (
    extract_topics,
    determine_intent,
    calculate_toxicity,
    apply_moderation_overrides,
)

__all__ = [
    "heuristic_classify",
    "is_spam",
    "refine_neutral",
    "classify_category",
    "fallback_classify",
    "fallback_sentiment",
    "extract_topics",
    "determine_intent",
    "calculate_toxicity",
    "apply_moderation_overrides",
]
