"""
Remote job tracking and the bounded poll loop.

A ProviderJob lives for one request only: it is created after a
successful submit, updated by poll responses, and dropped once the loop
returns. Nothing here is shared between requests.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from image.errors import ImageGenerationError

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    ERROR = "error"


@dataclass
class ProviderJob:
    """
    A job submitted to a polling-style provider.

    Only mark_ready and mark_error change it; both refuse to touch a job
    that is already terminal.
    """
    job_id: str
    status: JobStatus = JobStatus.PENDING
    result_url: Optional[str] = None
    polls: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in (JobStatus.READY, JobStatus.ERROR)

    def mark_ready(self, result_url: str) -> None:
        """Transition job to ready with its result URL."""
        self._ensure_open()
        self.status = JobStatus.READY
        self.result_url = result_url

    def mark_error(self) -> None:
        """Transition job to error."""
        self._ensure_open()
        self.status = JobStatus.ERROR

    def _ensure_open(self) -> None:
        if self.is_terminal:
            raise RuntimeError(f"Job {self.job_id} already {self.status.value}")


async def _no_wait(_seconds: float) -> None:
    return None


@dataclass(frozen=True)
class PollPolicy:
    """
    Bounds for a poll loop.

    Worst case wall-clock is max_attempts * interval plus request time.
    Tests pass PollPolicy.immediate() to skip the sleeps.
    """
    max_attempts: int = 30
    interval: float = 2.0
    per_attempt_timeout: float = 10.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False)

    @classmethod
    def immediate(cls, max_attempts: int = 30) -> "PollPolicy":
        return cls(max_attempts=max_attempts, interval=0.0, sleep=_no_wait)


# (status, result_url) for one poll response
StatusCheck = Callable[[ProviderJob], Awaitable[Tuple[JobStatus, Optional[str]]]]


async def poll_job(job: ProviderJob, check: StatusCheck, policy: PollPolicy) -> ProviderJob:
    """
    Poll a job until it is terminal or the attempt bound runs out.

    Sleeps policy.interval before every attempt. An attempt that raises
    ImageGenerationError (non-2xx, timeout, bad body) is ignored and
    counts toward the bound.

    Args:
        job: The submitted job, in pending status
        check: Fetches the current (status, result_url) for the job
        policy: Attempt bound, spacing and per-attempt timeout

    Returns:
        ProviderJob: The same job, terminal or still pending on timeout
    """
    while job.polls < policy.max_attempts and not job.is_terminal:
        await policy.sleep(policy.interval)
        job.polls += 1
        try:
            status, result_url = await check(job)
        except ImageGenerationError as e:
            logger.debug(f"Poll {job.polls}/{policy.max_attempts} for job {job.job_id} ignored: {e.message}")
            continue

        if status == JobStatus.READY and result_url:
            job.mark_ready(result_url)
        elif status == JobStatus.ERROR:
            job.mark_error()

    logger.info(f"Job {job.job_id} finished polling as {job.status.value} after {job.polls} poll(s)")
    return job
