"""
Black Forest Labs image provider.

Talks to the BFL API directly: submit a generation task, then poll the
result endpoint until the task is Ready, reports Error, or the poll bound
runs out.
"""
import logging
from typing import Optional, Tuple

import httpx

from image.base import GenerationRequest, ImageProvider, ImageSource, OrchestratorState
from image.errors import (
    ConfigurationAbsent,
    PollTimeout,
    ProtocolFailure,
    RemoteGenerationFailure,
)
from image.http import read_json, send
from image.polling import JobStatus, PollPolicy, ProviderJob, poll_job

logger = logging.getLogger(__name__)

BFL_SUBMIT_URL = "https://api.bfl.ml/v1/flux-pro-1.1"
BFL_RESULT_URL = "https://api.bfl.ml/v1/get_result"
SUBMIT_TIMEOUT = 30.0


class BFLImageProvider(ImageProvider):
    """
    Direct-API provider using the submit + poll protocol.
    """
    source = ImageSource.BFL
    state = OrchestratorState.TRYING_DIRECT_API

    def __init__(self, api_key: Optional[str], poll_policy: Optional[PollPolicy] = None):
        if not api_key:
            raise ConfigurationAbsent("FLUX_API_KEY is not set", provider=self.source.value)
        self.api_key = api_key
        self.poll_policy = poll_policy or PollPolicy()

    async def generate(self, request: GenerationRequest, client: httpx.AsyncClient) -> str:
        logger.info(f"[BFL] Submitting task for prompt: {request.prompt[:50]}...")
        job = await self._submit(request, client)

        async def check(current: ProviderJob) -> Tuple[JobStatus, Optional[str]]:
            return await self._fetch_status(current, client)

        await poll_job(job, check, self.poll_policy)

        if job.status == JobStatus.READY:
            logger.info(f"[BFL] Task {job.job_id} ready after {job.polls} poll(s)")
            return job.result_url
        if job.status == JobStatus.ERROR:
            raise RemoteGenerationFailure(
                f"BFL generation failed for task {job.job_id}", provider=self.source.value
            )
        raise PollTimeout(
            f"BFL task {job.job_id} timed out after {job.polls} polls",
            provider=self.source.value,
        )

    async def _submit(self, request: GenerationRequest, client: httpx.AsyncClient) -> ProviderJob:
        response = await send(
            client,
            "POST",
            BFL_SUBMIT_URL,
            provider=self.source.value,
            timeout=SUBMIT_TIMEOUT,
            headers={"X-Key": self.api_key, "Content-Type": "application/json"},
            json={
                "prompt": request.prompt,
                "width": request.width,
                "height": request.height,
            },
        )
        data = read_json(response, self.source.value)
        task_id = data.get("id")
        if not task_id:
            raise ProtocolFailure("BFL API returned no task id", provider=self.source.value)
        return ProviderJob(job_id=str(task_id))

    async def _fetch_status(
        self, job: ProviderJob, client: httpx.AsyncClient
    ) -> Tuple[JobStatus, Optional[str]]:
        response = await send(
            client,
            "GET",
            BFL_RESULT_URL,
            provider=self.source.value,
            timeout=self.poll_policy.per_attempt_timeout,
            headers={"X-Key": self.api_key},
            params={"id": job.job_id},
        )
        data = read_json(response, self.source.value)

        status = data.get("status")
        if status == "Ready":
            result = data.get("result")
            sample = result.get("sample") if isinstance(result, dict) else None
            if not isinstance(sample, str):
                sample = None
            return JobStatus.READY, sample
        if status == "Error":
            logger.error(f"[BFL] Task {job.job_id} reported error: {data}")
            return JobStatus.ERROR, None
        return JobStatus.PENDING, None
