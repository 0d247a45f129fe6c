"""
Caller-side job lifecycle around the translation pipeline.

The pipeline never writes job state itself. ``JobRunner`` marks a job as
translating, runs the pipeline, and stores either the review-ready segments or the
reverted pending state.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from doctrans.errors import DocTransError
from doctrans.models import JobStatus, TranslationJob, TranslationRequest
from doctrans.translation.pipeline import DocumentTranslationPipeline

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    """Create-or-update persistence of TranslationJobs keyed by (order_id, file_name)."""

    def upsert(self, job: TranslationJob) -> None: ...

    def get(self, order_id: str, file_name: str) -> TranslationJob | None: ...

    def record_event(
        self,
        job: TranslationJob,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None: ...


class InMemoryJobStore:
    """Dict-backed job store."""

    def __init__(self) -> None:
        self._jobs: dict[tuple[str, str], TranslationJob] = {}
        self.events: list[dict[str, Any]] = []

    def upsert(self, job: TranslationJob) -> None:
        job.updated_at = datetime.now(timezone.utc)
        self._jobs[job.key] = job

    def get(self, order_id: str, file_name: str) -> TranslationJob | None:
        return self._jobs.get((order_id, file_name))

    def list_jobs(self, order_id: str | None = None) -> list[TranslationJob]:
        return [j for j in self._jobs.values() if order_id is None or j.order_id == order_id]

    def record_event(
        self,
        job: TranslationJob,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.events.append(
            {
                "order_id": job.order_id,
                "file_name": job.file_name,
                "level": level,
                "message": message,
                "context": context or {},
            }
        )


def _error_summary(error: BaseException) -> tuple[str, dict[str, Any]]:
    if isinstance(error, DocTransError):
        return error.user_message, error.to_dict()
    return str(error) or type(error).__name__, {"error_type": type(error).__name__}


class JobRunner:
    """Runs the pipeline for one request and records the job lifecycle."""

    def __init__(self, pipeline: DocumentTranslationPipeline, store: JobStore):
        self.pipeline = pipeline
        self.store = store

    def _start(self, request: TranslationRequest) -> TranslationJob:
        job = self.store.get(request.order_id, request.file_name)
        fresh = TranslationJob.from_request(request)
        if job is None:
            job = fresh
        else:
            job.file_index = fresh.file_index
            job.source_language = fresh.source_language
            job.target_language = fresh.target_language
            job.provider = fresh.provider
            job.domain = fresh.domain
            job.model = fresh.model
            job.ocr_quality = fresh.ocr_quality
        job.status = JobStatus.TRANSLATING
        job.progress = 0
        job.segments = []
        job.detected_source_language = None
        job.error = None
        self.store.upsert(job)
        return job

    async def run(self, request: TranslationRequest) -> TranslationJob:
        """
        Translate one file and persist the outcome.

        Returns:
            The job in ``review`` status with its segments.

        Raises:
            Exception: Whatever the pipeline raised, after the job was reverted to
                ``pending`` with the error recorded.
        """
        job = self._start(request)
        self.store.record_event(
            job,
            "INFO",
            "Translation started",
            {"provider": job.provider.value, "domain": job.domain.value},
        )

        try:
            result = await self.pipeline.translate_document(request)
        except Exception as e:
            message, context = _error_summary(e)
            job.status = JobStatus.PENDING
            job.progress = 0
            job.error = message
            self.store.upsert(job)
            self.store.record_event(job, "ERROR", "Translation failed", context)
            logger.error(
                "Translation of %s failed: %s",
                request.file_name,
                e,
                extra={"order_id": request.order_id, "file_name": request.file_name},
            )
            raise

        job.segments = result.segments
        job.detected_source_language = result.detected_source_language
        job.status = JobStatus.REVIEW
        job.progress = 100
        self.store.upsert(job)
        self.store.record_event(
            job,
            "INFO",
            "Translation ready for review",
            {
                "segments": len(result.segments),
                "detected_source_language": result.detected_source_language,
            },
        )
        return job

    async def run_many(
        self, requests: list[TranslationRequest], limit: int = 4
    ) -> list[TranslationJob | BaseException]:
        """
        Run several files concurrently, at most ``limit`` at a time.

        Returns:
            One entry per request, in request order: the finished job or the
            exception that failed it.
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        semaphore = asyncio.Semaphore(limit)

        async def bounded(request: TranslationRequest) -> TranslationJob:
            async with semaphore:
                return await self.run(request)

        return await asyncio.gather(
            *(bounded(request) for request in requests), return_exceptions=True
        )
