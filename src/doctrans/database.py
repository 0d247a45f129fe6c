"""
DuckDB job store for doctrans.

Persists TranslationJobs keyed by (order_id, file_name) with their segments as JSON,
plus an append-only event log for auditing job lifecycles.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import duckdb

from doctrans.models import (
    DocumentDomain,
    JobStatus,
    OCRQualityLevel,
    ProviderKind,
    Segment,
    TranslationJob,
)


class DuckDBJobStore:
    """DuckDB-backed JobStore."""

    _SCHEMA = """
    -- One row per file of an order
    CREATE TABLE IF NOT EXISTS translation_jobs (
        order_id VARCHAR NOT NULL,
        file_name VARCHAR NOT NULL,
        file_index INTEGER DEFAULT 0,
        source_language VARCHAR NOT NULL,
        target_language VARCHAR NOT NULL,
        provider VARCHAR NOT NULL,
        domain VARCHAR NOT NULL,
        model VARCHAR,
        ocr_quality VARCHAR NOT NULL,
        status VARCHAR NOT NULL DEFAULT 'pending',
        progress INTEGER DEFAULT 0,
        segments JSON,
        error TEXT,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        detected_source_language VARCHAR,
        PRIMARY KEY (order_id, file_name)
    );

    -- Stores created before language detection was recorded
    ALTER TABLE translation_jobs ADD COLUMN IF NOT EXISTS detected_source_language VARCHAR;

    -- Job lifecycle audit trail
    CREATE TABLE IF NOT EXISTS job_events (
        id INTEGER PRIMARY KEY,
        run_id VARCHAR NOT NULL,
        order_id VARCHAR NOT NULL,
        file_name VARCHAR NOT NULL,
        level VARCHAR NOT NULL,
        message TEXT NOT NULL,
        context JSON,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );

    CREATE SEQUENCE IF NOT EXISTS job_events_id_seq START 1;

    CREATE INDEX IF NOT EXISTS idx_events_job ON job_events(order_id, file_name);
    """

    _COLUMNS = (
        "order_id, file_name, file_index, source_language, target_language, provider, "
        "domain, model, ocr_quality, status, progress, segments, error, updated_at, "
        "detected_source_language"
    )

    def __init__(self, db_path: Path | str = ":memory:"):
        """Initialize the store; ``:memory:`` keeps everything in process."""
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._run_id = str(uuid.uuid4())

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = duckdb.connect(self.db_path)
            self._conn.execute(self._SCHEMA)
        return self._conn

    @property
    def run_id(self) -> str:
        return self._run_id

    def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ==================== Jobs ====================

    def upsert(self, job: TranslationJob) -> None:
        """Create or update a job by (order_id, file_name)."""
        job.updated_at = datetime.now(timezone.utc)
        segments_json = json.dumps([s.to_dict() for s in job.segments], ensure_ascii=False)
        self.conn.execute(
            f"""
            INSERT INTO translation_jobs ({self._COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (order_id, file_name) DO UPDATE SET
                file_index = excluded.file_index,
                source_language = excluded.source_language,
                target_language = excluded.target_language,
                provider = excluded.provider,
                domain = excluded.domain,
                model = excluded.model,
                ocr_quality = excluded.ocr_quality,
                status = excluded.status,
                progress = excluded.progress,
                segments = excluded.segments,
                error = excluded.error,
                updated_at = excluded.updated_at,
                detected_source_language = excluded.detected_source_language
            """,
            [
                job.order_id,
                job.file_name,
                job.file_index,
                job.source_language,
                job.target_language,
                job.provider.value,
                job.domain.value,
                job.model,
                job.ocr_quality.value,
                job.status.value,
                job.progress,
                segments_json,
                job.error,
                job.updated_at.replace(tzinfo=None),
                job.detected_source_language,
            ],
        )

    def get(self, order_id: str, file_name: str) -> TranslationJob | None:
        """Get a job by its key."""
        row = self.conn.execute(
            f"SELECT {self._COLUMNS} FROM translation_jobs WHERE order_id = ? AND file_name = ?",
            [order_id, file_name],
        ).fetchone()
        if row:
            return self._row_to_job(row)
        return None

    def list_jobs(
        self, order_id: str | None = None, status: JobStatus | None = None
    ) -> list[TranslationJob]:
        """List jobs, optionally filtered by order and status."""
        conditions = []
        params: list[Any] = []
        if order_id:
            conditions.append("order_id = ?")
            params.append(order_id)
        if status:
            conditions.append("status = ?")
            params.append(status.value)
        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self.conn.execute(
            f"SELECT {self._COLUMNS} FROM translation_jobs {where_clause} "
            "ORDER BY order_id, file_index, file_name",
            params,
        ).fetchall()
        return [self._row_to_job(row) for row in rows]

    def _row_to_job(self, row: tuple) -> TranslationJob:
        """Convert database row to TranslationJob."""
        segments_raw = json.loads(row[11]) if row[11] else []
        return TranslationJob(
            order_id=row[0],
            file_name=row[1],
            file_index=row[2] or 0,
            source_language=row[3],
            target_language=row[4],
            provider=ProviderKind(row[5]),
            domain=DocumentDomain(row[6]),
            model=row[7],
            ocr_quality=OCRQualityLevel(row[8]),
            status=JobStatus(row[9]),
            progress=row[10] or 0,
            segments=[Segment.from_dict(s) for s in segments_raw],
            error=row[12],
            updated_at=row[13],
            detected_source_language=row[14],
        )

    # ==================== Events ====================

    def record_event(
        self,
        job: TranslationJob,
        level: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Insert a job event."""
        context_json = json.dumps(context, default=str) if context else None
        self.conn.execute(
            """
            INSERT INTO job_events
            (id, run_id, order_id, file_name, level, message, context)
            VALUES (nextval('job_events_id_seq'), ?, ?, ?, ?, ?, ?)
            """,
            [self._run_id, job.order_id, job.file_name, level, message, context_json],
        )

    def get_events(
        self,
        order_id: str | None = None,
        file_name: str | None = None,
        level: str | None = None,
        limit: int = 100,
    ) -> list[dict]:
        """Get job events, oldest first."""
        conditions = []
        params: list[Any] = []

        if order_id:
            conditions.append("order_id = ?")
            params.append(order_id)
        if file_name:
            conditions.append("file_name = ?")
            params.append(file_name)
        if level:
            conditions.append("level = ?")
            params.append(level)

        where_clause = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self.conn.execute(
            f"""
            SELECT run_id, order_id, file_name, level, message, context, created_at
            FROM job_events
            {where_clause}
            ORDER BY id
            LIMIT ?
            """,
            [*params, limit],
        ).fetchall()

        return [
            {
                "run_id": row[0],
                "order_id": row[1],
                "file_name": row[2],
                "level": row[3],
                "message": row[4],
                "context": json.loads(row[5]) if row[5] else None,
                "created_at": row[6],
            }
            for row in rows
        ]

    def get_statistics(self) -> dict:
        """Job counts by status."""
        rows = self.conn.execute(
            "SELECT status, COUNT(*) FROM translation_jobs GROUP BY status"
        ).fetchall()
        return {status: count for status, count in rows}
