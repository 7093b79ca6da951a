import json

from scanner.reporter import ResultsReporter


class TestResultsReporter:
    def test_writes_report(self, pipeline, sample_dir, mock_config):
        summary = pipeline.process_paths([str(sample_dir)])
        reporter = ResultsReporter(mock_config.REPORT_DIR)
        path = reporter.generate_report(summary, pipeline.results(), pipeline.blackboard.get_all())

        with open(path, encoding="utf-8") as f:
            report = json.load(f)

        assert report["scan_id"].startswith("SCAN-")
        assert report["summary"]["processed"] == 5
        assert report["attribute_count"] == 5
        assert len(report["files"]) == 5

    def test_empty_file_entropy_written_as_null(self, pipeline, sample_dir, mock_config):
        summary = pipeline.process_paths([str(sample_dir / "empty.dat")])
        reporter = ResultsReporter(mock_config.REPORT_DIR)
        path = reporter.generate_report(summary, pipeline.results(), pipeline.blackboard.get_all())

        with open(path, encoding="utf-8") as f:
            text = f.read()
        assert "NaN" not in text
        report = json.loads(text)
        assert report["files"][0]["entropy"] is None
        assert report["attributes"][0]["value"] is None

    def test_failures_listed_with_message(self, pipeline, sample_dir, mock_config):
        summary = pipeline.process_paths([str(sample_dir / "missing.bin"), str(sample_dir / "zeros.bin")])
        reporter = ResultsReporter(mock_config.REPORT_DIR)
        path = reporter.generate_report(
            summary, pipeline.results(), pipeline.blackboard.get_all(), pipeline.outcomes.values()
        )

        with open(path, encoding="utf-8") as f:
            report = json.load(f)
        assert len(report["errors"]) == 1
        error = report["errors"][0]
        assert error["error"] == "io_failure"
        assert error["file_id"] == 1
        assert "file 1" in error["message"]
