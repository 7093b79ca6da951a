import io
import os
import json
import pytest

from scanner.handles import StreamHandle
from scanner.reporter import ResultsReporter
from dashboard.server import create_app


@pytest.fixture
def client(pipeline, mock_config):
    app = create_app(pipeline, report_dir=mock_config.REPORT_DIR)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


class TestDashboardRoutes:
    def test_index_lists_endpoints(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["module"] == "EntropyModule"
        assert "/api/attributes" in data["endpoints"]

    def test_api_status(self, client):
        resp = client.get("/api/status")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["running"] is True
        assert data["files"] == 0

    def test_api_files_after_scan(self, client, pipeline, sample_dir):
        pipeline.process_paths([str(sample_dir)])
        resp = client.get("/api/files")
        assert resp.status_code == 200
        rows = resp.get_json()
        assert len(rows) == 5
        empty = [r for r in rows if r["path"].endswith("empty.dat")][0]
        assert empty["entropy"] is None

    def test_api_attributes(self, client, pipeline, sample_dir):
        pipeline.process_file(str(sample_dir / "all_bytes.bin"))
        resp = client.get("/api/attributes")
        data = resp.get_json()
        assert data[0]["value"] == 8.0
        assert data[0]["kind"] == "entropy"

    def test_api_attributes_for_file(self, client, pipeline):
        pipeline.module.run(StreamHandle(1, io.BytesIO(b"\x00\x01")))
        pipeline.files[1] = "stream"
        resp = client.get("/api/attributes/1")
        assert resp.status_code == 200
        assert resp.get_json()[0]["value"] == 1.0

    def test_api_attributes_unknown_file(self, client):
        resp = client.get("/api/attributes/99")
        assert resp.status_code == 404

    def test_api_recent_returns_list(self, client):
        resp = client.get("/api/attributes/recent")
        assert resp.status_code == 200
        assert isinstance(resp.get_json(), list)

    def test_api_reports_returns_list(self, client):
        resp = client.get("/api/reports")
        assert resp.status_code == 200
        assert resp.get_json() == []

    def test_api_report_rejects_non_json(self, client):
        resp = client.get("/api/reports/secret.txt")
        assert resp.status_code == 400

    def test_api_report_detail_serves_written_report(self, client, pipeline, sample_dir, mock_config):
        summary = pipeline.process_paths([str(sample_dir / "zeros.bin")])
        reporter = ResultsReporter(mock_config.REPORT_DIR)
        path = reporter.generate_report(summary, pipeline.results(), pipeline.blackboard.get_all())
        name = os.path.basename(path)

        assert client.get("/api/reports").get_json() == [name]

        resp = client.get(f"/api/reports/{name}")
        try:
            assert resp.status_code == 200
            report = resp.get_json()
        finally:
            resp.close()
        assert report["scan_id"] == name[:-len(".json")]
        assert report["files"][0]["entropy"] == 0.0


class TestAttributeStream:
    def _first_frame(self, client, post):
        resp = client.get("/api/stream", buffered=False)
        try:
            assert resp.status_code == 200
            assert resp.mimetype == "text/event-stream"
            post()
            frame = next(iter(resp.response))
        finally:
            resp.close()
        if isinstance(frame, str):
            frame = frame.encode("utf-8")
        assert frame.startswith(b"data: ")
        return json.loads(frame[len(b"data: "):])

    def test_streams_posted_attribute(self, client, pipeline):
        payload = self._first_frame(
            client,
            lambda: pipeline.blackboard.post("entropy", "EntropyModule", "Entropy", 8.0, 3),
        )
        assert payload["kind"] == "entropy"
        assert payload["value"] == 8.0
        assert payload["file_id"] == 3

    def test_nan_streamed_as_null(self, client, pipeline):
        payload = self._first_frame(
            client,
            lambda: pipeline.blackboard.post("entropy", "EntropyModule", "Entropy", float("nan"), 4),
        )
        assert payload["value"] is None
        assert payload["file_id"] == 4

    def test_module_run_reaches_stream(self, client, pipeline):
        payload = self._first_frame(
            client,
            lambda: pipeline.module.run(StreamHandle(9, io.BytesIO(b"\x00\x01"))),
        )
        assert payload["source"] == "EntropyModule"
        assert payload["value"] == 1.0
