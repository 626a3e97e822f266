"""
Analytics service.
Scores tracked problems by readiness and difficulty and aggregates the scores
per topic category for the radar charts and the composite GPA.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional, Sequence

from ..models import Difficulty, utcnow
from .readiness_service import (
    Readiness, as_utc, classify, format_time, normalize_difficulty,
)


@dataclass(frozen=True)
class Category:
    """A named group of topic tags."""
    name: str
    tags: FrozenSet[str]


def _category(name: str, *tags: str) -> Category:
    return Category(name=name, tags=frozenset(tags or (name,)))


DATA_STRUCTURE_CATEGORIES: List[Category] = [
    _category("Array & String", "Array", "String"),
    _category("Linked List"),
    _category("Hash Table"),
    _category("Tree", "Tree", "Binary Tree", "Binary Search Tree"),
    _category(
        "Graph", "Graph", "Breadth-First Search", "Depth-First Search",
        "Topological Sort", "Shortest Path",
    ),
    _category("Heap / PQ", "Heap (Priority Queue)"),
    _category("Stack / Queue", "Stack", "Queue", "Monotonic Stack", "Monotonic Queue"),
    _category("Trie"),
]

ALGORITHM_CATEGORIES: List[Category] = [
    _category("Dynamic Programming"),
    _category("Binary Search"),
    _category("Two Pointers"),
    _category("Sliding Window"),
    _category("Backtracking"),
    _category("Greedy"),
    _category("Bit Manipulation"),
    _category("Union Find"),
]

# Readiness + difficulty -> 0..5
SCORE_TABLE: Dict[Readiness, Dict[Difficulty, int]] = {
    Readiness.MASTERED: {Difficulty.EASY: 3, Difficulty.MEDIUM: 4, Difficulty.HARD: 5},
    Readiness.RUSTY: {Difficulty.EASY: 2, Difficulty.MEDIUM: 3, Difficulty.HARD: 4},
    Readiness.REVISIT: {Difficulty.EASY: 2, Difficulty.MEDIUM: 3, Difficulty.HARD: 4},
    Readiness.WEAK: {Difficulty.EASY: 1, Difficulty.MEDIUM: 2, Difficulty.HARD: 3},
    Readiness.UNSOLVED: {Difficulty.EASY: 0, Difficulty.MEDIUM: 0, Difficulty.HARD: 0},
}


@dataclass
class ScoredProblem:
    """Readiness and score of one tracked problem."""
    tags: Sequence[str]
    difficulty: Optional[Difficulty]
    readiness: Readiness
    score: int
    time_spent: Optional[int]


@dataclass
class CategoryScore:
    category: str
    score: float
    count: int


def get_score(readiness, difficulty) -> int:
    """Score of a readiness/difficulty pair; unknown combinations score 0."""
    try:
        readiness = Readiness(readiness)
    except ValueError:
        return 0
    level = normalize_difficulty(difficulty)
    if level is None:
        return 0
    return SCORE_TABLE[readiness].get(level, 0)


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0


class AnalyticsService:
    """Service for per-category scoring and dashboard statistics."""

    def __init__(
        self,
        data_structure_categories: Optional[List[Category]] = None,
        algorithm_categories: Optional[List[Category]] = None,
    ):
        self.data_structure_categories = (
            DATA_STRUCTURE_CATEGORIES if data_structure_categories is None else data_structure_categories
        )
        self.algorithm_categories = (
            ALGORITHM_CATEGORIES if algorithm_categories is None else algorithm_categories
        )

    @property
    def categories(self) -> List[Category]:
        return self.data_structure_categories + self.algorithm_categories

    def score_problems(self, user_problems, now: Optional[datetime] = None) -> List[ScoredProblem]:
        """Classify every problem once and attach its score."""
        now = as_utc(now) or utcnow()
        scored = []
        for up in user_problems:
            readiness = classify(up, now=now)
            scored.append(ScoredProblem(
                tags=up.problem.tags or [],
                difficulty=normalize_difficulty(up.problem.difficulty),
                readiness=readiness,
                score=get_score(readiness, up.problem.difficulty),
                time_spent=up.time_spent,
            ))
        return scored

    def score_categories(
        self,
        categories: Sequence[Category],
        scored: Sequence[ScoredProblem],
    ) -> List[CategoryScore]:
        """Average score of the problems matching each category (0 when none match)."""
        results = []
        for category in categories:
            matching = [p.score for p in scored if category.tags.intersection(p.tags)]
            results.append(CategoryScore(
                category=category.name,
                score=round(_mean(matching), 2),
                count=len(matching),
            ))
        return results

    def gpa(self, category_scores: Sequence[CategoryScore]) -> float:
        """
        Mean of all category scores, empty categories included.

        The denominator is the taxonomy size, not the number of problems, so
        users with different list sizes stay comparable.
        """
        return round(_mean([c.score for c in category_scores]), 2)

    def build_report(self, user_problems, now: Optional[datetime] = None) -> Dict:
        """
        Full analytics payload for a user's list.

        Returns dict with:
        - total_problems, solved, avg_time (seconds) and avg_time_display
        - readiness_counts: label -> count
        - difficulty_stats: per difficulty totals, solved, avg time and readiness mix
        - data_structure_scores / algorithm_scores: radar chart points
        - gpa: composite score
        """
        scored = self.score_problems(user_problems, now)

        solved_times = [p.time_spent for p in scored if p.time_spent is not None]
        avg_time = round(_mean(solved_times)) if solved_times else None

        counts = Counter(p.readiness for p in scored)
        readiness_counts = {r.value: counts.get(r, 0) for r in Readiness}

        difficulty_stats = []
        for level in Difficulty:
            members = [p for p in scored if p.difficulty == level]
            times = [p.time_spent for p in members if p.time_spent is not None]
            level_counts = Counter(p.readiness for p in members)
            level_avg = round(_mean(times)) if times else None
            difficulty_stats.append({
                "difficulty": level.value,
                "total": len(members),
                "solved": len(times),
                "avg_time": level_avg,
                "avg_time_display": format_time(level_avg),
                "readiness": {
                    r.value: level_counts.get(r, 0)
                    for r in Readiness if r != Readiness.UNSOLVED
                },
            })

        ds_scores = self.score_categories(self.data_structure_categories, scored)
        algo_scores = self.score_categories(self.algorithm_categories, scored)

        return {
            "total_problems": len(scored),
            "solved": len(solved_times),
            "avg_time": avg_time,
            "avg_time_display": format_time(avg_time),
            "readiness_counts": readiness_counts,
            "difficulty_stats": difficulty_stats,
            "data_structure_scores": ds_scores,
            "algorithm_scores": algo_scores,
            "gpa": self.gpa(ds_scores + algo_scores),
        }


# Singleton instance
_analytics_service: Optional[AnalyticsService] = None


def get_analytics_service() -> AnalyticsService:
    """Get the singleton analytics service instance."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service
