"""
Score Scaler Module
===================
Applies dimension normalization to a rater's complete score set.

A rater's scale is characterized by everything they rated, so each dimension
is normalized over the rater's entire set, never per post. The three
dimensions are independent searches. Values are written back only once all
three have succeeded, so a failing rater is left exactly as ingested.

Usage:
    from scoreboard.scoring.scaler import ScoreScaler

    scaler = ScoreScaler()
    scaler.scale(alice_scores)           # in place, all or nothing

    pool = scaler.scale_raters({"alice": alice_scores, "bob": bob_scores})
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .normalizers import DimensionNormalizer, ScalingError
from ..config import FAILURE_POLICIES
from ..models import Dimension, Score
from ..logging_config import log_rater_scaled, log_scaling_failure

logger = logging.getLogger(__name__)


@dataclass
class ScalingReport:
    """Outcome of scaling a group of raters."""
    scores: List[Score] = field(default_factory=list)
    scaled: List[str] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)
    kept_raw: List[str] = field(default_factory=list)
    errors: Dict[str, ScalingError] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    @property
    def raters(self) -> List[str]:
        """Raters whose scores are in the pool, in pool order."""
        included = set(self.scaled) | set(self.kept_raw)
        return [o for o in self.order if o in included]


class ScoreScaler:
    """
    Normalizes all three dimensions of one rater's scores in place.

    Usage:
        scaler = ScoreScaler(on_failure="drop", max_workers=4)
        report = scaler.scale_raters(scores_by_owner)
    """

    def __init__(
        self,
        normalizer: Optional[DimensionNormalizer] = None,
        on_failure: str = "abort",
        max_workers: int = 1
    ):
        """
        Initialize the scaler.

        Args:
            normalizer: Normalizer to use for each dimension
            on_failure: 'abort' re-raises, 'drop' discards the rater,
                        'raw' keeps the rater's unscaled values
            max_workers: Raters scaled concurrently (1 = sequential)
        """
        if on_failure not in FAILURE_POLICIES:
            raise ValueError(f"Unknown failure policy: {on_failure}")

        self.normalizer = normalizer or DimensionNormalizer()
        self.on_failure = on_failure
        self.max_workers = max(1, max_workers)

    def scale(self, scores: List[Score]) -> Dict[str, Optional[float]]:
        """
        Normalize one rater's scores in place.

        Args:
            scores: Every score of a single rater

        Returns:
            Search parameter per dimension (None for a degenerate dimension)

        Raises:
            ScalingError: If any dimension fails; no score is modified
        """
        owner = scores[0].owner if scores else None
        normalized = {}
        parameters = {}

        for dimension in Dimension.rated():
            column = [getattr(s, dimension.value) for s in scores]
            try:
                result = self.normalizer.normalize_with_details(column)
            except ScalingError as e:
                raise e.with_context(owner, dimension.value) from e
            normalized[dimension] = result.values
            parameters[dimension.value] = result.parameter

        for i, score in enumerate(scores):
            score.literary = normalized[Dimension.LITERARY][i]
            score.thinking = normalized[Dimension.THINKING][i]
            score.mozheng = normalized[Dimension.MOZHENG][i]

        return parameters

    def _scale_rater(self, owner: str, scores: List[Score]):
        try:
            parameters = self.scale(scores)
        except ScalingError as e:
            return owner, None, e
        return owner, parameters, None

    def scale_raters(self, scores_by_owner: Dict[str, List[Score]]) -> ScalingReport:
        """
        Scale every rater and pool the results.

        Raters are independent and may be scaled concurrently; the pool is
        always assembled in the mapping's owner order.

        Args:
            scores_by_owner: Each rater's full score list

        Returns:
            ScalingReport with the pooled scores

        Raises:
            ScalingError: If a rater fails and the policy is 'abort'
        """
        owners = list(scores_by_owner)

        if self.max_workers > 1 and len(owners) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(
                    lambda o: self._scale_rater(o, scores_by_owner[o]), owners
                ))
        else:
            outcomes = [self._scale_rater(o, scores_by_owner[o]) for o in owners]

        report = ScalingReport(order=owners)
        for owner, parameters, error in outcomes:
            scores = scores_by_owner[owner]

            if error is None:
                log_rater_scaled(owner, len(scores), parameters)
                report.scaled.append(owner)
                report.scores.extend(scores)
                continue

            log_scaling_failure(owner, error.dimension, error.error, self.on_failure)
            report.errors[owner] = error

            if self.on_failure == "abort":
                raise error
            if self.on_failure == "drop":
                report.dropped.append(owner)
            else:
                report.kept_raw.append(owner)
                report.scores.extend(scores)

        return report


def scale_scores(scores: List[Score]) -> None:
    """
    Convenience function to normalize one rater's scores in place.

    Raises:
        ScalingError: If any dimension fails; no score is modified
    """
    ScoreScaler().scale(scores)
