"""
Pipeline Package
================
Builds the scoreboard from the catalog and rater files.

This package provides:
- Individual stages that can run independently
- A composed pipeline that runs all stages in sequence
- Timing and status tracking per stage

Usage:
    from scoreboard.pipeline import BoardPipeline, build_board

    board = build_board()
    board.entries[0].sum_avg()
"""

from .context import BoardContext, StageResult
from .base import PipelineStage
from .pipeline import BoardPipeline, build_board

__all__ = [
    'BoardContext',
    'StageResult',
    'PipelineStage',
    'BoardPipeline',
    'build_board',
]
