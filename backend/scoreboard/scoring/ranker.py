"""
Post Ranking Module
===================
Orders board entries and individual scores by a chosen column.

Features:
- One enumerated key per sortable column
- Stable ascending sort, reversed for descending order
- IEEE total ordering, so unrated posts (NaN) sort after every number
"""

import math
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..models import Dimension, Post, PostWithScores, Score

logger = logging.getLogger(__name__)


class PostSortKey(str, Enum):
    """Sortable columns of the board."""
    TITLE = "title"
    AUTHOR = "author"
    LITERARY_AVG = "literary_avg"
    LITERARY_VAR = "literary_var"
    THINKING_AVG = "thinking_avg"
    THINKING_VAR = "thinking_var"
    MOZHENG_AVG = "mozheng_avg"
    MOZHENG_VAR = "mozheng_var"
    SUM_AVG = "sum_avg"
    SUM_VAR = "sum_var"


class ScoreSortKey(str, Enum):
    """Sortable columns of a score listing."""
    POST = "post"
    OWNER = "owner"
    LITERARY = "literary"
    THINKING = "thinking"
    MOZHENG = "mozheng"
    SUM = "sum"


def _total_order(value: float) -> Tuple[int, float]:
    # NaN compares greater than +inf
    if math.isnan(value):
        return (1, 0.0)
    return (0, value)


def _statistic(dimension: Dimension, name: str) -> Callable[[PostWithScores], Tuple[int, float]]:
    if name == "avg":
        return lambda entry: _total_order(entry.average(dimension))
    return lambda entry: _total_order(entry.variance(dimension))


POST_KEYS: Dict[PostSortKey, Callable[[PostWithScores], object]] = {
    PostSortKey.TITLE: lambda entry: entry.post.title,
    PostSortKey.AUTHOR: lambda entry: entry.post.author,
    PostSortKey.LITERARY_AVG: _statistic(Dimension.LITERARY, "avg"),
    PostSortKey.LITERARY_VAR: _statistic(Dimension.LITERARY, "var"),
    PostSortKey.THINKING_AVG: _statistic(Dimension.THINKING, "avg"),
    PostSortKey.THINKING_VAR: _statistic(Dimension.THINKING, "var"),
    PostSortKey.MOZHENG_AVG: _statistic(Dimension.MOZHENG, "avg"),
    PostSortKey.MOZHENG_VAR: _statistic(Dimension.MOZHENG, "var"),
    PostSortKey.SUM_AVG: _statistic(Dimension.SUM, "avg"),
    PostSortKey.SUM_VAR: _statistic(Dimension.SUM, "var"),
}

# Sorting by post needs the catalog and is resolved in PostRanker.sort_scores
SCORE_KEYS: Dict[ScoreSortKey, Callable[[Score], object]] = {
    ScoreSortKey.OWNER: lambda score: score.owner,
    ScoreSortKey.LITERARY: lambda score: _total_order(score.literary),
    ScoreSortKey.THINKING: lambda score: _total_order(score.thinking),
    ScoreSortKey.MOZHENG: lambda score: _total_order(score.mozheng),
    ScoreSortKey.SUM: lambda score: _total_order(score.sum()),
}


class PostRanker:
    """
    Ranks board entries and scores.

    Descending order is the reversed ascending order, so ties come out in
    reverse pooling order and NaN entries come first.

    Usage:
        ranker = PostRanker()
        ranked = ranker.rank(board.entries, PostSortKey.SUM_AVG, ascending=False)
        top_5 = ranker.top_k(board.entries, 5)
    """

    def rank(
        self,
        entries: Sequence[PostWithScores],
        key: PostSortKey = PostSortKey.TITLE,
        ascending: bool = True
    ) -> List[PostWithScores]:
        """
        Sort board entries by a column.

        Args:
            entries: Entries to sort (not modified)
            key: Column to sort by
            ascending: Sort direction

        Returns:
            A new sorted list
        """
        ranked = sorted(entries, key=POST_KEYS[PostSortKey(key)])
        if not ascending:
            ranked.reverse()
        return ranked

    def sort_scores(
        self,
        scores: Sequence[Score],
        key: ScoreSortKey = ScoreSortKey.OWNER,
        ascending: bool = True,
        posts: Optional[Sequence[Post]] = None
    ) -> List[Score]:
        """
        Sort individual scores by a column.

        Scores sort by post under the post's title, so the catalog must be
        passed for ScoreSortKey.POST.

        Raises:
            ValueError: For an unknown key, or POST without a catalog
        """
        key = ScoreSortKey(key)
        if key is ScoreSortKey.POST:
            if posts is None:
                raise ValueError("Sorting scores by post requires the post catalog")
            sort_key = lambda score: posts[score.post_id].title
        else:
            sort_key = SCORE_KEYS[key]

        ordered = sorted(scores, key=sort_key)
        if not ascending:
            ordered.reverse()
        return ordered

    def top_k(
        self,
        entries: Sequence[PostWithScores],
        k: int,
        key: PostSortKey = PostSortKey.SUM_AVG
    ) -> List[PostWithScores]:
        """
        Best k rated entries by a column, highest first.

        Unrated entries are left out.
        """
        rated = [e for e in entries if e.scores]
        return self.rank(rated, key, ascending=False)[:k]


def rank_posts(
    entries: Sequence[PostWithScores],
    key: PostSortKey = PostSortKey.SUM_AVG,
    ascending: bool = False
) -> List[PostWithScores]:
    """Convenience function to rank board entries, best composite first."""
    return PostRanker().rank(entries, key, ascending)
