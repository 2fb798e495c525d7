"""
Pipeline Stages Module
======================
Implements the stages that build the scoreboard.

Stages:
1. CatalogLoadStage - Load the post catalog
2. ScoreIngestStage - Load every rater file against the catalog
3. ScalingStage - Normalize each rater's scores
4. AggregationStage - Group the normalized pool by post
"""

import logging

from .base import PipelineStage
from .context import BoardContext
from ..ingestion import load_catalog, load_rater_directory
from ..scoring import ScoreScaler, ScoreAggregator

logger = logging.getLogger(__name__)


# =============================================================================
# STAGE 1: CATALOG
# =============================================================================

class CatalogLoadStage(PipelineStage):
    """
    Reads:
        - context.config.paths.catalog

    Writes:
        - context.catalog
    """

    @property
    def name(self) -> str:
        return "catalog_load"

    @property
    def description(self) -> str:
        return "Load the post catalog"

    def _execute(self, context: BoardContext) -> None:
        context.catalog = list(load_catalog(context.config.paths.catalog))

    def _get_output_summary(self, context: BoardContext) -> str:
        return f"{len(context.catalog)} posts"


# =============================================================================
# STAGE 2: SCORE INGESTION
# =============================================================================

class ScoreIngestStage(PipelineStage):
    """
    Reads:
        - context.config.paths.scores
        - context.catalog

    Writes:
        - context.raw_scores
    """

    @property
    def name(self) -> str:
        return "score_ingest"

    @property
    def description(self) -> str:
        return "Load one score file per rater and resolve titles"

    def _execute(self, context: BoardContext) -> None:
        context.raw_scores = load_rater_directory(context.config.paths.scores, context.catalog)

    def _get_output_summary(self, context: BoardContext) -> str:
        total = sum(len(s) for s in context.raw_scores.values())
        return f"{total} scores from {len(context.raw_scores)} raters"


# =============================================================================
# STAGE 3: SCALING
# =============================================================================

class ScalingStage(PipelineStage):
    """
    Reads:
        - context.raw_scores
        - context.config.scaling

    Writes:
        - context.scaling_report (raw_scores are scaled in place)
    """

    @property
    def name(self) -> str:
        return "scaling"

    @property
    def description(self) -> str:
        return "Normalize every rater's scores per dimension"

    def _execute(self, context: BoardContext) -> None:
        settings = context.config.scaling
        scaler = ScoreScaler(
            on_failure=settings.on_failure,
            max_workers=settings.max_workers if settings.parallel else 1,
        )
        context.scaling_report = scaler.scale_raters(context.raw_scores)

    def _get_output_summary(self, context: BoardContext) -> str:
        report = context.scaling_report
        summary = f"{len(report.scaled)} raters scaled"
        if report.dropped:
            summary += f", dropped {', '.join(report.dropped)}"
        if report.kept_raw:
            summary += f", kept raw {', '.join(report.kept_raw)}"
        return summary


# =============================================================================
# STAGE 4: AGGREGATION
# =============================================================================

class AggregationStage(PipelineStage):
    """
    Reads:
        - context.catalog
        - context.scaling_report

    Writes:
        - context.entries
    """

    @property
    def name(self) -> str:
        return "aggregation"

    @property
    def description(self) -> str:
        return "Group normalized scores by post"

    def _execute(self, context: BoardContext) -> None:
        context.entries = ScoreAggregator(context.catalog).aggregate(context.pooled_scores)

    def _get_output_summary(self, context: BoardContext) -> str:
        rated = sum(1 for e in context.entries if e.scores)
        return f"{rated}/{len(context.entries)} posts rated"


# =============================================================================
# STAGE REGISTRY
# =============================================================================

ALL_STAGES = [
    CatalogLoadStage,
    ScoreIngestStage,
    ScalingStage,
    AggregationStage,
]

