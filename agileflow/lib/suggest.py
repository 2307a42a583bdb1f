"""
Fuzzy matching for "Did you mean?" suggestions.
"""

from difflib import SequenceMatcher
from pathlib import Path
from typing import Optional


def find_similar(query: str, candidates: list[str], threshold: float = 0.6) -> Optional[str]:
    """
    Find the most similar candidate to query.

    Args:
        query: The user's input
        candidates: List of valid options
        threshold: Minimum similarity ratio (0-1) to suggest

    Returns:
        Best match if above threshold, None otherwise
    """
    if not candidates:
        return None

    best_match = None
    best_ratio = 0.0

    query_lower = query.lower()

    for candidate in candidates:
        ratio = SequenceMatcher(None, query_lower, candidate.lower()).ratio()
        if ratio > best_ratio:
            best_ratio = ratio
            best_match = candidate

    if best_ratio >= threshold:
        return best_match

    return None


def suggest_issue(query: str, stage_dirs: list[Path]) -> Optional[str]:
    """Find a similar issue name across the given stage directories."""
    candidates = []
    for stage_dir in stage_dirs:
        if not stage_dir.exists():
            continue
        candidates.extend(
            d.name for d in stage_dir.iterdir()
            if d.is_dir() and not d.name.startswith('.')
        )

    return find_similar(query, candidates)


def suggest_spec(query: str, issue_dir: Path) -> Optional[str]:
    """Find a similar spec name inside an issue folder."""
    candidates = [f.name[:-len(".spec.md")] for f in issue_dir.glob("*.spec.md")]
    return find_similar(query, candidates)
