"""
Scoring Module
==============
Normalizes rater scores and aggregates them per post.

This module implements:
- Per-rater, per-dimension normalization to a canonical spread
- Atomic three-dimension scaling of a rater's score set
- Grouping of the normalized pool by post
- Ranking of posts and scores by column

Usage:
    from scoreboard.scoring import ScoreScaler, ScoreAggregator, PostRanker

    report = ScoreScaler().scale_raters(scores_by_owner)
    entries = ScoreAggregator(catalog).aggregate(report.scores)

    ranked = PostRanker().rank(entries, PostSortKey.SUM_AVG, ascending=False)
"""

from .normalizers import (
    DimensionNormalizer,
    NormalizationResult,
    ScalingError,
    normalize_dimension,
)
from .scaler import ScoreScaler, ScalingReport, scale_scores
from .aggregator import ScoreAggregator, aggregate_scores
from .ranker import PostRanker, PostSortKey, ScoreSortKey, rank_posts

__all__ = [
    'DimensionNormalizer',
    'NormalizationResult',
    'ScalingError',
    'normalize_dimension',
    'ScoreScaler',
    'ScalingReport',
    'scale_scores',
    'ScoreAggregator',
    'aggregate_scores',
    'PostRanker',
    'PostSortKey',
    'ScoreSortKey',
    'rank_posts',
]
