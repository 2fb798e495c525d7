"""
Pipeline Base Module
====================
Defines the base class for all pipeline stages.

Each stage:
- Has a name and description
- Takes a BoardContext and modifies it
- Tracks execution time and status
"""

import logging
import time
from abc import ABC, abstractmethod

from .context import BoardContext
from ..logging_config import log_stage_start, log_stage_complete, log_stage_error

logger = logging.getLogger(__name__)


class PipelineStage(ABC):
    """
    Abstract base class for pipeline stages.

    Subclasses must implement:
    - name: Stage identifier
    - description: Human-readable description
    - _execute(): The actual stage logic

    The base class handles timing, logging and error recording.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this stage."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this stage does."""

    @abstractmethod
    def _execute(self, context: BoardContext) -> None:
        """
        Execute the stage logic, writing outputs into the context.

        Raises:
            Any exception on failure (will be caught by run())
        """

    def _get_output_summary(self, context: BoardContext) -> str:
        """Summary of what this stage produced. Override for detail."""
        return "completed"

    def run(self, context: BoardContext) -> bool:
        """
        Run this pipeline stage.

        Returns:
            True if stage completed successfully, False otherwise
        """
        log_stage_start(self.name, context.run_id)
        start_time = time.time()

        try:
            self._execute(context)
        except Exception as e:
            duration = time.time() - start_time
            error_msg = str(e)
            logger.exception(f"Stage {self.name} raised {type(e).__name__}")
            log_stage_error(self.name, context.run_id, error_msg, duration)
            context.record_stage(
                self.name,
                success=False,
                duration=duration,
                error=error_msg
            )
            return False

        duration = time.time() - start_time
        summary = self._get_output_summary(context)
        log_stage_complete(self.name, context.run_id, duration, summary)
        context.record_stage(
            self.name,
            success=True,
            duration=duration,
            summary=summary
        )
        return True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}: {self.name}>"
