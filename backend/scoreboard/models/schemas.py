"""
Data Models and Schemas Module
==============================
Defines the entities shared by ingestion, scaling, aggregation and the API.

This module provides:
- Post: one catalog entry, identified by its position in the catalog
- Score: one rater's three ratings for one post
- PostWithScores: a post with every score it received and its statistics
- Board: the frozen result of a full build, handed to consumers

Usage:
    from scoreboard.models import Post, Score, PostWithScores, Dimension

    score = Score(owner="alice", post_id=0, literary=0.2, thinking=0.4, mozheng=0.1)
    score.sum()  # 0.75

    entry = PostWithScores(id=0, post=post, scores=[score])
    entry.average(Dimension.SUM)
"""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Sequence, Tuple
import json
import math
import uuid


# Weight of the mozheng dimension in the composite score
MOZHENG_WEIGHT = 1.5

# Histogram range per dimension; the composite spans more than one unit
HISTOGRAM_MAX_SCORE = 1.0
HISTOGRAM_MAX_SUM = 3.5
HISTOGRAM_STEPS = 5


# =============================================================================
# ENUMS
# =============================================================================

class Dimension(str, Enum):
    """Rated qualities of a post, plus the weighted composite."""
    LITERARY = "literary"
    THINKING = "thinking"
    MOZHENG = "mozheng"
    SUM = "sum"

    @classmethod
    def rated(cls) -> Tuple["Dimension", ...]:
        """The three dimensions raters score directly."""
        return (cls.LITERARY, cls.THINKING, cls.MOZHENG)


# =============================================================================
# BASE CLASSES
# =============================================================================

class BaseModel:
    """Mixin for the dataclass models with common serialization methods."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary, handling nested objects."""
        def convert(obj):
            if isinstance(obj, BaseModel):
                return obj.to_dict()
            elif isinstance(obj, Enum):
                return obj.value
            elif isinstance(obj, (list, tuple)):
                return [convert(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: convert(v) for k, v in obj.items()}
            return obj

        return {k: convert(v) for k, v in asdict(self).items()}

    def to_json(self, indent: int = 2) -> str:
        """Convert model to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseModel":
        """Create model from dictionary."""
        return cls(**data)


def json_number(value: float) -> Optional[float]:
    """JSON has no NaN literal; an undefined statistic is written as null."""
    if value is None or math.isnan(value):
        return None
    return value


def _round_half_away(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def _mean(values: List[float]) -> float:
    # Left-to-right accumulation; an empty list is 0/0
    if not values:
        return math.nan
    total = 0.0
    for v in values:
        total += v
    return total / len(values)


def _population_variance(values: List[float]) -> float:
    if not values:
        return math.nan
    avg = _mean(values)
    total = 0.0
    for v in values:
        total += (v - avg) ** 2
    return total / len(values)


# =============================================================================
# POSTS
# =============================================================================

@dataclass(frozen=True)
class Post(BaseModel):
    """
    A post in the competition catalog.

    Attributes:
        title: Post title, unique within the catalog
        author: Author name
        url: Link to the published post
    """
    title: str
    author: str
    url: str


# =============================================================================
# SCORES
# =============================================================================

@dataclass
class Score(BaseModel):
    """
    One rater's ratings for one post.

    Values are raw ratings after ingestion and normalized ratings after the
    scaling pass; the scaling pass is the only writer.

    Attributes:
        owner: Rater name (the rater file's stem)
        post_id: Index of the post in the catalog
        literary: Literary quality
        thinking: Quality of thought
        mozheng: Mozheng rating
    """
    owner: str
    post_id: int
    literary: float
    thinking: float
    mozheng: float

    def sum(self) -> float:
        """Weighted composite: literary + thinking + 1.5 * mozheng."""
        return self.literary + self.thinking + MOZHENG_WEIGHT * self.mozheng

    def value(self, dimension: Dimension) -> float:
        """Value of one dimension, or the composite for Dimension.SUM."""
        dimension = Dimension(dimension)
        if dimension is Dimension.SUM:
            return self.sum()
        return getattr(self, dimension.value)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['sum'] = self.sum()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Score":
        data = {k: v for k, v in data.items() if k != 'sum'}
        return cls(**data)


@dataclass
class PostWithScores(BaseModel):
    """
    A catalog post together with every score it received.

    Statistics are computed on demand from the score list, never cached.
    A post nobody rated has NaN for every average and variance.

    Attributes:
        id: Index of the post in the catalog
        post: The catalog entry
        scores: Scores for this post, in ingestion order
    """
    id: int
    post: Post
    scores: Sequence[Score] = field(default_factory=list)

    @property
    def score_count(self) -> int:
        return len(self.scores)

    def values(self, dimension: Dimension) -> List[float]:
        """All values of one dimension across this post's scores."""
        return [s.value(dimension) for s in self.scores]

    def average(self, dimension: Dimension) -> float:
        """Arithmetic mean of a dimension."""
        return _mean(self.values(dimension))

    def variance(self, dimension: Dimension) -> float:
        """Population variance of a dimension (divisor = score count)."""
        return _population_variance(self.values(dimension))

    def literary_avg(self) -> float:
        return self.average(Dimension.LITERARY)

    def literary_var(self) -> float:
        return self.variance(Dimension.LITERARY)

    def thinking_avg(self) -> float:
        return self.average(Dimension.THINKING)

    def thinking_var(self) -> float:
        return self.variance(Dimension.THINKING)

    def mozheng_avg(self) -> float:
        return self.average(Dimension.MOZHENG)

    def mozheng_var(self) -> float:
        return self.variance(Dimension.MOZHENG)

    def sum_avg(self) -> float:
        return self.average(Dimension.SUM)

    def sum_var(self) -> float:
        return self.variance(Dimension.SUM)

    def histogram(self, dimension: Dimension) -> Dict[int, int]:
        """
        Bucket counts of a dimension for distribution plots.

        Each value lands in bucket round(value / max_score * 5), where
        max_score is 3.5 for the composite and 1.0 otherwise. Buckets are
        returned in ascending order; empty buckets are omitted.
        """
        dimension = Dimension(dimension)
        max_score = HISTOGRAM_MAX_SUM if dimension is Dimension.SUM else HISTOGRAM_MAX_SCORE

        counts: Dict[int, int] = {}
        for value in self.values(dimension):
            bucket = _round_half_away(value / max_score * HISTOGRAM_STEPS)
            counts[bucket] = counts.get(bucket, 0) + 1
        return dict(sorted(counts.items()))

    def statistics(self) -> Dict[str, Dict[str, float]]:
        """Average and variance for every dimension and the composite."""
        return {
            d.value: {'avg': self.average(d), 'var': self.variance(d)}
            for d in Dimension
        }

    def summary_dict(self) -> Dict[str, Any]:
        """JSON-ready summary without the individual scores."""
        return {
            'id': self.id,
            'post': self.post.to_dict(),
            'score_count': self.score_count,
            'statistics': {
                name: {k: json_number(v) for k, v in stats.items()}
                for name, stats in self.statistics().items()
            },
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.summary_dict()
        data['scores'] = [s.to_dict() for s in self.scores]
        return data

    def copy(self) -> "PostWithScores":
        """Copy with independent Score objects."""
        return replace(self, scores=[replace(s) for s in self.scores])


# =============================================================================
# BOARD
# =============================================================================

@dataclass(frozen=True)
class Board:
    """
    The complete, read-only result of building the scoreboard.

    Built once by the pipeline and shared by reference with every consumer.
    The pipeline stores each entry's scores as a tuple, so no score can be
    added or removed. Score objects themselves are plain dataclasses and
    must not be modified once the board is built.

    Attributes:
        posts: The catalog, in catalog order
        scores: The pooled normalized scores, grouped by rater in owner order
        entries: One PostWithScores per catalog post, in catalog order
        raters: Raters whose scores made it into the pool
        run_id: Identifier of the pipeline run that built the board
    """
    posts: Tuple[Post, ...]
    scores: Tuple[Score, ...]
    entries: Tuple[PostWithScores, ...]
    raters: Tuple[str, ...] = ()
    run_id: Optional[str] = None

    @property
    def post_count(self) -> int:
        return len(self.posts)

    @property
    def score_count(self) -> int:
        return len(self.scores)

    def post(self, post_id: int) -> Post:
        """Catalog entry by index. Raises IndexError for unknown ids."""
        if post_id < 0:
            raise IndexError(f"post id {post_id} out of range")
        return self.posts[post_id]

    def entry(self, post_id: int) -> PostWithScores:
        """PostWithScores by index. Raises IndexError for unknown ids."""
        if post_id < 0:
            raise IndexError(f"post id {post_id} out of range")
        return self.entries[post_id]

    def scores_by(self, owner: str) -> List[Score]:
        """All scores submitted by one rater."""
        return [s for s in self.scores if s.owner == owner]

    def summary(self) -> Dict[str, Any]:
        return {
            'run_id': self.run_id,
            'post_count': self.post_count,
            'score_count': self.score_count,
            'raters': list(self.raters),
        }


def generate_run_id(prefix: str = "board") -> str:
    """Generate a unique id for a pipeline run."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}"
