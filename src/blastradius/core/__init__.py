"""Diff-driven change detection."""

from .change_detector import (
    ChangedSpan, EnhancedEffectInfo, EnhancedEffectReport, FileChange,
    build_enhanced_effect_from_changes, compute_changed_span,
    extract_relevant_snippets, find_affected_symbols_from_diff
)

__all__ = [
    "ChangedSpan", "EnhancedEffectInfo", "EnhancedEffectReport", "FileChange",
    "build_enhanced_effect_from_changes", "compute_changed_span",
    "extract_relevant_snippets", "find_affected_symbols_from_diff",
]
