"""
Completion poller for queued ComfyUI jobs.

The poller walks SUBMITTED -> POLLING -> {COMPLETED, FAILED, TIMED_OUT}. Each
tick sleeps for the poll interval before querying /history/{prompt_id}.
"""

import asyncio
import logging
import math
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from .client.comfyui_client import ComfyUIClient
from .exceptions import InvalidResponseError, JobFailedError, JobTimeoutError
from .logging_config import create_job_logger
from .models import JobResult

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class PollState(Enum):
    """States of a poll run."""
    SUBMITTED = "submitted"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class CompletionPoller:
    """Polls a job's history entry until it completes, fails or times out."""

    def __init__(
        self,
        client: ComfyUIClient,
        interval_seconds: float = 10.0,
        initial_delay_seconds: float = 0.0,
        sleep: Optional[SleepFunc] = None
    ):
        """
        Initialize the poller.

        Args:
            client: ComfyUI client used for history queries
            interval_seconds: Sleep before every status query
            initial_delay_seconds: Extra wait before the first tick
            sleep: Awaitable sleep, injectable for tests
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.client = client
        self.interval_seconds = interval_seconds
        self.initial_delay_seconds = initial_delay_seconds
        self._sleep = sleep or asyncio.sleep
        self.state = PollState.SUBMITTED
        self.attempts = 0

    def max_attempts(self, timeout_minutes: float) -> int:
        """Number of status queries allowed within the timeout."""
        return max(1, math.floor(timeout_minutes * 60 / self.interval_seconds))

    async def wait_for_completion(self, prompt_id: str, timeout_minutes: float) -> JobResult:
        """
        Poll until the job finishes.

        Args:
            prompt_id: Job identifier returned by /prompt
            timeout_minutes: Poll budget in minutes

        Returns:
            The completed job's history entry

        Raises:
            JobFailedError: If the job reports status "error", completed or not
            JobTimeoutError: If the budget is exhausted
            FetchError: If a status query fails in transport
        """
        job_logger = create_job_logger("poll", prompt_id=prompt_id)
        max_attempts = self.max_attempts(timeout_minutes)
        self.state = PollState.POLLING
        self.attempts = 0

        if self.initial_delay_seconds > 0:
            await self._sleep(self.initial_delay_seconds)

        while self.attempts < max_attempts:
            await self._sleep(self.interval_seconds)
            self.attempts += 1
            job_logger.debug(f"Checking job status (attempt {self.attempts}/{max_attempts})")

            history = await self.client.get_history(prompt_id)
            entry = history.get(prompt_id)
            if not entry:
                job_logger.debug("Prompt not found in history")
                continue

            status = entry.get("status") if isinstance(entry, dict) else None
            if not isinstance(status, dict):
                job_logger.debug("Execution status not found")
                continue

            # ComfyUI reports failed runs with completed=false
            if status.get("status_str") == "error":
                self.state = PollState.FAILED
                job_logger.error("Job reported an error status")
                raise JobFailedError(
                    "[ComfyUI] Job execution failed",
                    prompt_id=prompt_id,
                    status=status
                )

            if not status.get("completed"):
                continue

            try:
                result = JobResult.model_validate(entry)
            except ValidationError as e:
                self.state = PollState.FAILED
                raise InvalidResponseError(
                    f"Malformed history entry for {prompt_id}",
                    cause=e
                ) from e

            self.state = PollState.COMPLETED
            job_logger.info(f"Job completed after {self.attempts} status checks")
            return result

        self.state = PollState.TIMED_OUT
        raise JobTimeoutError(
            f"Timeout after {timeout_minutes:g} minutes",
            prompt_id=prompt_id,
            attempts=self.attempts
        )
