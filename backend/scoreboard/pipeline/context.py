"""
Pipeline Context Module
=======================
Defines the shared context that flows through all pipeline stages.

The BoardContext holds:
- Input parameters (configuration, data locations)
- Intermediate results (catalog, raw scores per rater)
- Final outputs (scaling report, board entries)
- Execution metadata (timing, stage completion status)
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Dict, List

from ..config import AppConfig, get_config
from ..models import Board, Post, PostWithScores, Score, generate_run_id
from ..scoring.scaler import ScalingReport

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Result of a single pipeline stage execution."""
    stage_name: str
    success: bool
    duration_seconds: float
    error_message: Optional[str] = None
    output_summary: Optional[str] = None


@dataclass
class BoardContext:
    """
    Shared context that flows through all pipeline stages.

    Each stage reads what it needs and writes its outputs.

    Attributes:
        config: Configuration for this run
        catalog: Loaded post catalog
        raw_scores: Each rater's scores; scaled in place by the scaling stage
        scaling_report: Pooled scores and per-rater outcome
        entries: One PostWithScores per catalog post
        board: The frozen result
        run_id: Unique identifier for this run
        stage_results: Timing and status for each stage
    """

    config: AppConfig = field(default_factory=get_config)

    catalog: List[Post] = field(default_factory=list)
    raw_scores: Dict[str, List[Score]] = field(default_factory=dict)
    scaling_report: Optional[ScalingReport] = None
    entries: List[PostWithScores] = field(default_factory=list)

    board: Optional[Board] = None

    run_id: str = field(default_factory=lambda: generate_run_id("board"))
    stage_results: List[StageResult] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    completed_at: Optional[str] = None

    @property
    def pooled_scores(self) -> List[Score]:
        if self.scaling_report is None:
            return []
        return self.scaling_report.scores

    @property
    def total_duration_seconds(self) -> float:
        return sum(r.duration_seconds for r in self.stage_results)

    @property
    def successful_stages(self) -> List[str]:
        return [r.stage_name for r in self.stage_results if r.success]

    @property
    def failed_stages(self) -> List[str]:
        return [r.stage_name for r in self.stage_results if not r.success]

    @property
    def is_complete(self) -> bool:
        """Check if the run finished without failures."""
        return len(self.failed_stages) == 0 and self.board is not None

    def record_stage(
        self,
        stage_name: str,
        success: bool,
        duration: float,
        error: Optional[str] = None,
        summary: Optional[str] = None
    ) -> None:
        """Record the result of a stage execution."""
        self.stage_results.append(StageResult(
            stage_name=stage_name,
            success=success,
            duration_seconds=duration,
            error_message=error,
            output_summary=summary
        ))

    def finalize(self) -> Board:
        """
        Freeze the stage outputs into a Board.

        Raises:
            ValueError: If aggregation has not run
        """
        if not self.entries and self.catalog:
            raise ValueError("Cannot finalize: posts have not been aggregated")

        report = self.scaling_report
        self.board = Board(
            posts=tuple(self.catalog),
            scores=tuple(self.pooled_scores),
            entries=tuple(replace(e, scores=tuple(e.scores)) for e in self.entries),
            raters=tuple(report.raters) if report else (),
            run_id=self.run_id,
        )
        self.completed_at = datetime.now().isoformat()
        return self.board
