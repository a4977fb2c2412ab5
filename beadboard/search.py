"""Fuzzy issue search: subsequence scoring, ranking, and title highlights.

Scoring works on per-character case folds so match positions always index
into the original string, which the renderer needs for highlighting.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .issues import Issue

NEUTRAL_SCORE = 0
MATCH_SCORE = 16
CONSECUTIVE_BONUS = 12
BOUNDARY_BONUS = 8
CAMEL_BONUS = 6
FIRST_CHAR_BONUS_MULTIPLIER = 2
GAP_START_PENALTY = 3
GAP_EXTENSION_PENALTY = 1
_BOUNDARY_CHARS = frozenset("/_-.:#[( \t\n")


@dataclass(frozen=True)
class FuzzyMatch:
    score: int
    positions: tuple[int, ...]


@dataclass(frozen=True)
class SearchResult:
    """One ranked hit; ``issue_id`` refers back into the current snapshot."""

    issue_id: str
    score: int = NEUTRAL_SCORE
    title_positions: tuple[int, ...] = ()


def _is_boundary(candidate: str, idx: int) -> bool:
    return idx == 0 or candidate[idx - 1] in _BOUNDARY_CHARS


def _is_camel_hump(candidate: str, idx: int) -> bool:
    return idx > 0 and candidate[idx].isupper() and candidate[idx - 1].islower()


def score_positions(candidate: str, positions: Sequence[int]) -> int:
    """Score one alignment of query characters onto ``candidate``."""
    score = 0
    prev_idx = -1
    for order, idx in enumerate(positions):
        score += MATCH_SCORE
        if prev_idx >= 0:
            gap = idx - prev_idx - 1
            if gap == 0:
                score += CONSECUTIVE_BONUS
            else:
                score -= GAP_START_PENALTY + (gap - 1) * GAP_EXTENSION_PENALTY
        bonus = 0
        if _is_boundary(candidate, idx):
            bonus = BOUNDARY_BONUS
        elif _is_camel_hump(candidate, idx):
            bonus = CAMEL_BONUS
        if order == 0:
            bonus *= FIRST_CHAR_BONUS_MULTIPLIER
        score += bonus
        prev_idx = idx
    return score


def _greedy_tail(folded: list[str], needles: list[str], start: int) -> list[int] | None:
    positions: list[int] = []
    cursor = start
    for needle in needles:
        while cursor < len(folded) and folded[cursor] != needle:
            cursor += 1
        if cursor >= len(folded):
            return None
        positions.append(cursor)
        cursor += 1
    return positions


def fuzzy_match(query: str, candidate: str) -> FuzzyMatch | None:
    """Return the best subsequence alignment of ``query`` in ``candidate``.

    Every occurrence of the first query character is tried as an anchor and
    the rest of the query is matched leftmost from there. The highest score
    wins; on ties the earliest anchor is kept. ``None`` means no match.
    """
    if not query:
        return FuzzyMatch(NEUTRAL_SCORE, ())
    needles = [ch.casefold() for ch in query]
    folded = [ch.casefold() for ch in candidate]
    if len(needles) > len(folded):
        return None

    best: FuzzyMatch | None = None
    for anchor, ch in enumerate(folded):
        if ch != needles[0]:
            continue
        tail = _greedy_tail(folded, needles[1:], anchor + 1)
        if tail is None:
            # Later anchors only shrink the remaining text.
            break
        positions = (anchor, *tail)
        score = score_positions(candidate, positions)
        if best is None or score > best.score:
            best = FuzzyMatch(score, positions)
    return best


def fuzzy_score(query: str, candidate: str) -> int | None:
    match = fuzzy_match(query, candidate)
    return None if match is None else match.score


def search_haystack(issue: Issue) -> str:
    return " ".join(
        [
            issue.id,
            issue.title,
            issue.description or "",
            issue.assignee or "",
            " ".join(issue.labels),
        ]
    )


def rank_issues(issues: Sequence[Issue], query: str) -> list[SearchResult]:
    """Rank ``issues`` against ``query``.

    An empty query keeps every issue in snapshot order with a neutral score.
    Otherwise non-matching issues are dropped and hits are ordered by score
    descending, then priority ascending, then id ascending.
    """
    if not query:
        return [SearchResult(issue_id=issue.id) for issue in issues]

    scored: list[tuple[int, int, str, SearchResult]] = []
    for issue in issues:
        match = fuzzy_match(query, search_haystack(issue))
        if match is None:
            continue
        title_match = fuzzy_match(query, issue.title)
        title_positions = title_match.positions if title_match is not None else ()
        result = SearchResult(issue_id=issue.id, score=match.score, title_positions=title_positions)
        scored.append((-match.score, issue.priority, issue.id, result))
    scored.sort(key=lambda item: (item[0], item[1], item[2]))
    return [result for _, _, _, result in scored]


def highlight_spans(text: str, positions: Sequence[int]) -> list[tuple[str, bool]]:
    """Split ``text`` into ``(segment, matched)`` runs for highlight rendering."""
    if not text:
        return []
    marked = set(positions)
    spans: list[tuple[str, bool]] = []
    start = 0
    current = 0 in marked
    for idx in range(1, len(text)):
        flag = idx in marked
        if flag != current:
            spans.append((text[start:idx], current))
            start = idx
            current = flag
    spans.append((text[start:], current))
    return spans
