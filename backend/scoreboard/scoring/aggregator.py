"""
Score Aggregation Module
========================
Groups the pooled normalized scores by post.

Every catalog post gets an entry, rated or not. Scores keep the order in
which they were pooled. Averages and variances are computed by
PostWithScores on demand.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Sequence

from ..models import Post, PostWithScores, Score

logger = logging.getLogger(__name__)


class ScoreAggregator:
    """
    Partitions a score pool into one PostWithScores per catalog post.

    Usage:
        aggregator = ScoreAggregator(catalog)
        entries = aggregator.aggregate(pool)
        entries[3].sum_avg()
    """

    def __init__(self, catalog: Sequence[Post]):
        """
        Initialize the aggregator.

        Args:
            catalog: The post catalog; a post's index is its id
        """
        self.catalog = catalog

    def aggregate(self, scores: Iterable[Score]) -> List[PostWithScores]:
        """
        Build one entry per catalog post from a score pool.

        Args:
            scores: Normalized scores in pool order

        Returns:
            Entries in catalog order, each holding copies of its scores

        Raises:
            ValueError: If a score refers to a post outside the catalog
        """
        entries = [
            PostWithScores(id=post_id, post=post, scores=[])
            for post_id, post in enumerate(self.catalog)
        ]

        for score in scores:
            if not 0 <= score.post_id < len(entries):
                raise ValueError(
                    f"Score by {score.owner} refers to post {score.post_id}, "
                    f"catalog has {len(entries)} posts"
                )
            entries[score.post_id].scores.append(replace(score))

        unrated = sum(1 for e in entries if not e.scores)
        if unrated:
            logger.info(f"{unrated} of {len(entries)} posts have no scores")

        return entries


def aggregate_scores(catalog: Sequence[Post], scores: Iterable[Score]) -> List[PostWithScores]:
    """Convenience function to group a score pool by post."""
    return ScoreAggregator(catalog).aggregate(scores)
