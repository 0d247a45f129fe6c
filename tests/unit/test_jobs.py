"""Tests for the job lifecycle runner and the job stores."""

import asyncio

import duckdb
import httpx
import pytest

from doctrans.config import GoogleConfig
from doctrans.database import DuckDBJobStore
from doctrans.errors import OCRError
from doctrans.jobs import InMemoryJobStore, JobRunner
from doctrans.models import JobStatus, ProviderKind, Segment, TranslationJob, TranslationRequest
from doctrans.translation.pipeline import DocumentTranslation, DocumentTranslationPipeline
from doctrans.translation.providers import GoogleTranslateProvider
from doctrans.translation.registry import ClientRegistry

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@pytest.fixture(params=["memory", "duckdb"])
def store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryJobStore()
    else:
        duck = DuckDBJobStore(tmp_path / "jobs.duckdb")
        yield duck
        duck.close()


def _request(data: bytes, **overrides) -> TranslationRequest:
    fields = {
        "order_id": "order-7",
        "file_name": "prices.xlsx",
        "source_language": "auto",
        "target_language": "fr",
        "data": data,
        "mime_type": XLSX,
        "provider": "google",
    }
    fields.update(overrides)
    return TranslationRequest(**fields)


class TestJobRunner:
    async def test_success_moves_job_to_review(self, registry, store, xlsx_factory):
        runner = JobRunner(DocumentTranslationPipeline(registry), store)

        job = await runner.run(_request(xlsx_factory({"Sheet1": [["Preis", "Menge"]]})))

        assert job.status == JobStatus.REVIEW
        assert job.progress == 100
        stored = store.get("order-7", "prices.xlsx")
        assert stored.status == JobStatus.REVIEW
        assert [s.translated_text for s in stored.segments] == [
            "Sheet1!R1C1\n[fr] Preis",
            "Sheet1!R1C2\n[fr] Menge",
        ]
        assert stored.error is None

    async def test_failure_reverts_to_pending_and_reraises(
        self, settings, fake_translator, store, png_bytes, ocr_factory
    ):
        registry = ClientRegistry(
            settings,
            ocr=ocr_factory(error=OCRError("quota exceeded")),
            translators={ProviderKind.GOOGLE: fake_translator},
        )
        runner = JobRunner(DocumentTranslationPipeline(registry), store)

        with pytest.raises(OCRError):
            await runner.run(_request(png_bytes, file_name="scan.png", mime_type="image/png"))

        stored = store.get("order-7", "scan.png")
        assert stored.status == JobStatus.PENDING
        assert stored.progress == 0
        assert stored.segments == []
        assert stored.error == OCRError.default_user_message

    async def test_run_many_isolates_failures(self, registry, xlsx_factory):
        runner = JobRunner(DocumentTranslationPipeline(registry), InMemoryJobStore())

        results = await runner.run_many(
            [
                _request(xlsx_factory({"A": [["eins"]]}), file_name="a.xlsx", file_index=0),
                _request(b"x", file_name="b.txt", mime_type="text/plain", file_index=1),
            ]
        )

        assert isinstance(results[0], TranslationJob)
        assert results[0].segments[0].id.startswith("seg-0-")
        assert isinstance(results[1], Exception)

    async def test_events_recorded(self, registry, xlsx_factory):
        store = InMemoryJobStore()
        runner = JobRunner(DocumentTranslationPipeline(registry), store)
        await runner.run(_request(xlsx_factory({"A": [["eins"]]})))

        assert [e["message"] for e in store.events] == [
            "Translation started",
            "Translation ready for review",
        ]

    async def test_detected_source_language_stored(self, settings, store, xlsx_factory):
        detected = iter(["de", "de", "nl"])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "data": {
                        "translations": [
                            {"translatedText": "Prix", "detectedSourceLanguage": next(detected)}
                        ]
                    }
                },
            )

        google = GoogleTranslateProvider(
            GoogleConfig(api_key="key"),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        registry = ClientRegistry(settings, translators={ProviderKind.GOOGLE: google})
        runner = JobRunner(DocumentTranslationPipeline(registry), store)

        job = await runner.run(_request(xlsx_factory({"Sheet1": [["Preis", "Menge", "Prijs"]]})))

        assert job.detected_source_language == "de"
        assert store.get("order-7", "prices.xlsx").detected_source_language == "de"

    async def test_backend_without_detection_leaves_language_unset(
        self, registry, store, xlsx_factory
    ):
        runner = JobRunner(DocumentTranslationPipeline(registry), store)
        job = await runner.run(_request(xlsx_factory({"A": [["eins"]]})))

        assert job.detected_source_language is None
        assert store.get("order-7", "prices.xlsx").detected_source_language is None

    async def test_run_many_respects_limit(self):
        class SlowPipeline:
            def __init__(self):
                self.active = 0
                self.peak = 0

            async def translate_document(self, request):
                self.active += 1
                self.peak = max(self.peak, self.active)
                await asyncio.sleep(0.01)
                self.active -= 1
                return DocumentTranslation([])

        pipeline = SlowPipeline()
        runner = JobRunner(pipeline, InMemoryJobStore())
        requests = [
            _request(b"", file_name=f"{index}.xlsx", file_index=index) for index in range(5)
        ]

        results = await runner.run_many(requests, limit=2)

        assert pipeline.peak == 2
        assert [job.file_name for job in results] == [f"{index}.xlsx" for index in range(5)]

    async def test_run_many_rejects_zero_limit(self, registry):
        runner = JobRunner(DocumentTranslationPipeline(registry), InMemoryJobStore())
        with pytest.raises(ValueError):
            await runner.run_many([], limit=0)


class TestDuckDBJobStore:
    def test_upsert_replaces_by_key(self):
        store = DuckDBJobStore()
        job = TranslationJob(order_id="o", file_name="f.pdf", provider=ProviderKind.ANTHROPIC)
        store.upsert(job)

        job.status = JobStatus.REVIEW
        job.segments = [Segment(id="s-0", original_text="Hallo", translated_text="Hello")]
        store.upsert(job)

        jobs = store.list_jobs(order_id="o")
        assert len(jobs) == 1
        assert jobs[0].status == JobStatus.REVIEW
        assert jobs[0].provider == ProviderKind.ANTHROPIC
        assert jobs[0].segments == job.segments
        assert store.get_statistics() == {"review": 1}
        store.close()

    def test_list_jobs_filters_by_status(self):
        store = DuckDBJobStore()
        store.upsert(TranslationJob(order_id="o", file_name="a", file_index=1))
        store.upsert(TranslationJob(order_id="o", file_name="b", status=JobStatus.REVIEW))

        assert [j.file_name for j in store.list_jobs()] == ["b", "a"]
        assert [j.file_name for j in store.list_jobs(status=JobStatus.PENDING)] == ["a"]
        assert store.get("o", "missing") is None
        store.close()

    def test_events_in_insertion_order(self):
        store = DuckDBJobStore()
        job = TranslationJob(order_id="o", file_name="f")
        store.record_event(job, "INFO", "started", {"provider": "google"})
        store.record_event(job, "ERROR", "failed")

        events = store.get_events(order_id="o")
        assert [e["message"] for e in events] == ["started", "failed"]
        assert events[0]["context"] == {"provider": "google"}
        assert events[1]["context"] is None
        assert store.get_events(level="ERROR")[0]["run_id"] == store.run_id
        store.close()

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "nested" / "jobs.duckdb"
        store = DuckDBJobStore(path)
        store.upsert(TranslationJob(order_id="o", file_name="f", error="boom"))
        store.close()

        reopened = DuckDBJobStore(path)
        assert reopened.get("o", "f").error == "boom"
        reopened.close()

    def test_older_store_gains_detected_language_column(self, tmp_path):
        path = tmp_path / "old.duckdb"
        conn = duckdb.connect(str(path))
        conn.execute(
            """
            CREATE TABLE translation_jobs (
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
                PRIMARY KEY (order_id, file_name)
            )
            """
        )
        conn.close()

        store = DuckDBJobStore(path)
        store.upsert(TranslationJob(order_id="o", file_name="f", detected_source_language="fr"))
        assert store.get("o", "f").detected_source_language == "fr"
        store.close()
