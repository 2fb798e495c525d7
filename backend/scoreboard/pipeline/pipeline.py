"""
Board Pipeline Module
=====================
Builds the scoreboard by running the stages in sequence.

The board is built once, at start-up, and then only read.

Usage:
    from scoreboard.pipeline import BoardPipeline

    board = BoardPipeline().run()

    # With a custom config
    from scoreboard.config import AppConfig
    config = AppConfig()
    config.scaling.on_failure = "drop"
    board = BoardPipeline().run(config=config)

    # Load data without scaling, e.g. to inspect raw ratings
    context = BoardPipeline().run_stages(["catalog_load", "score_ingest"])
"""

import logging
import time
from typing import Optional, List

from .context import BoardContext
from .base import PipelineStage
from .stages import ALL_STAGES
from ..config import AppConfig, get_config
from ..models import Board

logger = logging.getLogger(__name__)


class BoardPipeline:
    """
    Composes the build stages and runs them in sequence.

    Usage:
        pipeline = BoardPipeline()
        board = pipeline.run(config)
    """

    def __init__(self, stages: Optional[List[PipelineStage]] = None):
        """
        Initialize the pipeline.

        Args:
            stages: Stage instances to use. If None, uses the default stages.
        """
        if stages is None:
            self.stages = [stage_class() for stage_class in ALL_STAGES]
        else:
            self.stages = stages

    def run_stages(
        self,
        stage_names: Optional[List[str]] = None,
        config: Optional[AppConfig] = None,
        context: Optional[BoardContext] = None,
        stop_on_failure: bool = True
    ) -> BoardContext:
        """
        Run stages against a context and return the context.

        Args:
            stage_names: Stages to run. If None, runs all stages.
            config: Configuration to use. If None, uses global config.
            context: Existing context to continue. If None, a new one is made.
            stop_on_failure: Whether to stop if a stage fails.

        Raises:
            RuntimeError: If a stage fails and stop_on_failure is True.
        """
        if context is None:
            context = BoardContext(config=config or get_config())

        stages_to_run = self._get_stages_to_run(stage_names)

        for stage in stages_to_run:
            success = stage.run(context)

            if not success and stop_on_failure:
                error_msg = f"Pipeline failed at stage: {stage.name}"
                logger.error(error_msg)
                raise RuntimeError(error_msg)

        return context

    def run(self, config: Optional[AppConfig] = None) -> Board:
        """
        Build the board.

        Args:
            config: Configuration to use. If None, uses global config.

        Returns:
            The frozen Board.

        Raises:
            RuntimeError: If any stage fails.
        """
        config = config or get_config()
        logger.info(f"Building board from {config.paths.base_dir}")

        start_time = time.time()
        context = self.run_stages(config=config)
        board = context.finalize()

        logger.info(
            f"Board {board.run_id} built in {time.time() - start_time:.2f}s: "
            f"{board.post_count} posts, {board.score_count} scores"
        )
        return board

    def _get_stages_to_run(self, stage_names: Optional[List[str]] = None) -> List[PipelineStage]:
        if stage_names is None:
            return self.stages

        # Requested stages, in pipeline order
        name_set = set(stage_names)
        return [stage for stage in self.stages if stage.name in name_set]


def build_board(config: Optional[AppConfig] = None) -> Board:
    """Convenience function to build the board with the default stages."""
    return BoardPipeline().run(config=config)
