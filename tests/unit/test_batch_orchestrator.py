"""Unit tests for batch orchestration with injected filesystem collaborators."""

from __future__ import annotations

import threading
import time

import pytest

from humantouch.config import BatchConfig, NormalizerConfig
from humantouch.models.datatypes import (
    DocumentResult,
    FileResult,
    FileTask,
    HazardCategory,
    HazardReport,
)
from humantouch.pipeline import PATTERN_MISS_MESSAGE, BatchOrchestrator, summarize_results
from humantouch.text.document import DocumentNormalizer
from humantouch.text.hazards import detect_hazards


class FakeFileSystem:
    """In-memory reader/writer/copier/lister with optional failure injection."""

    def __init__(self, files: dict[str, str]) -> None:
        self.files = dict(files)
        self.writes: list[str] = []
        self.copies: list[tuple[str, str]] = []
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.listing: dict[str, list[str]] = {}

    def read(self, path: str) -> str:
        if path in self.fail_reads or path not in self.files:
            raise FileNotFoundError(f"No such file: {path}")
        return self.files[path]

    def write(self, path: str, text: str) -> None:
        if path in self.fail_writes:
            raise PermissionError(f"Read-only: {path}")
        self.writes.append(path)
        self.files[path] = text

    def copy(self, source: str, destination: str) -> None:
        self.copies.append((source, destination))
        self.files[destination] = self.files[source]

    def list(self, pattern: str) -> list[str]:
        return self.listing.get(pattern, [])


def _orchestrator(fs: FakeFileSystem, **config_values: object) -> BatchOrchestrator:
    """Build an orchestrator wired to the fake filesystem."""

    return BatchOrchestrator(
        BatchConfig(**config_values),  # type: ignore[arg-type]
        reader=fs.read,
        writer=fs.write,
        copier=fs.copy,
        lister=fs.list,
    )


def test_process_one_skips_clean_files_without_writing() -> None:
    """A file with no changes and no hazards is a no-op success."""

    fs = FakeFileSystem({"clean.html": "<p>plain</p>"})

    result = _orchestrator(fs).process_one("clean.html")

    assert result.status == "skipped"
    assert result.change_count == 0
    assert result.was_written is False
    assert fs.writes == []


def test_process_one_writes_normalized_markup() -> None:
    """Changed files should be overwritten with normalized content."""

    fs = FakeFileSystem({"a.html": "<p>\u201chi\u201d</p>"})

    result = _orchestrator(fs).process_one("a.html")

    assert result.status == "written"
    assert result.was_written is True
    assert result.was_backed_up is False
    assert result.change_count == 2
    assert fs.files["a.html"] == '<p>"hi"</p>'
    assert fs.copies == []


def test_process_one_backs_up_before_writing() -> None:
    """With backups enabled the original content is copied to `<path>.bak`."""

    fs = FakeFileSystem({"a.html": "<p>a\u2013b</p>"})

    result = _orchestrator(fs, create_backup=True).process_one("a.html")

    assert result.was_backed_up is True
    assert fs.copies == [("a.html", "a.html.bak")]
    assert fs.files["a.html.bak"] == "<p>a\u2013b</p>"
    assert fs.files["a.html"] == "<p>a-b</p>"


def test_process_one_dry_run_reports_changes_without_writing() -> None:
    """Dry runs should report the computed change count and leave files alone."""

    fs = FakeFileSystem({"a.html": "<p>a\u2013b\u2026</p>"})

    result = _orchestrator(fs, dry_run=True, create_backup=True).process_one("a.html")

    assert result.status == "previewed"
    assert result.change_count == 2
    assert result.was_written is False
    assert fs.writes == []
    assert fs.copies == []


def test_process_one_reports_hazards_without_writing_or_backing_up() -> None:
    """Hazards without changes should be reported but never trigger a write or backup."""

    fs = FakeFileSystem({"a.html": '<p data-x="\u201cq\u201d">x</p>'})

    result = _orchestrator(fs, create_backup=True).process_one("a.html")

    assert result.status == "skipped"
    assert result.change_count == 0
    assert result.hazards[HazardCategory.SMART_QUOTES_IN_ATTRIBUTE].count == 1
    assert fs.writes == []
    assert fs.copies == []


def test_process_one_captures_read_errors() -> None:
    """Read failures should become an errored result with empty hazards."""

    fs = FakeFileSystem({})

    result = _orchestrator(fs).process_one("missing.html")

    assert result.status == "errored"
    assert result.error == "No such file: missing.html"
    assert result.change_count == 0
    assert result.hazards == HazardReport.empty()


def test_process_one_captures_write_errors_after_backup() -> None:
    """Write failures are captured per file and keep the backup flag off."""

    fs = FakeFileSystem({"a.html": "<p>\u201cx\u201d</p>"})
    fs.fail_writes.add("a.html")

    result = _orchestrator(fs, create_backup=True).process_one("a.html")

    assert result.status == "errored"
    assert result.error == "Read-only: a.html"
    assert result.was_backed_up is False
    assert fs.files["a.html"] == "<p>\u201cx\u201d</p>"


def test_process_many_captures_unexpected_reader_errors_per_file() -> None:
    """A non-I/O failure in one file should not abort the rest of the batch."""

    fs = FakeFileSystem({"good.html": "<p>\u201cx\u201d</p>"})

    def read(path: str) -> str:
        if path == "bad.html":
            raise RuntimeError("boom")
        return fs.read(path)

    orchestrator = BatchOrchestrator(BatchConfig(), reader=read, writer=fs.write, copier=fs.copy)

    summary = orchestrator.process_many(["good.html", "bad.html"])

    assert summary.total_files == 2
    assert summary.error_count == 1
    assert summary.changed_count == 1
    assert summary.results[0].status == "written"
    assert summary.results[1].status == "errored"
    assert summary.results[1].error == "boom"


class _ExplodingNormalizer(DocumentNormalizer):
    """Normalizer that fails for one marker document."""

    def normalize_document(
        self, markup: str, config: NormalizerConfig | None = None
    ) -> DocumentResult:
        if "explode" in markup:
            raise ValueError("cannot normalize")
        return super().normalize_document(markup, config)


def test_normalizer_failures_become_errored_results() -> None:
    """Exceptions raised while normalizing are captured with an empty hazard report."""

    fs = FakeFileSystem({"a.html": "<p>explode \u200b</p>", "b.html": "<p>ok</p>"})
    orchestrator = BatchOrchestrator(
        BatchConfig(),
        reader=fs.read,
        writer=fs.write,
        copier=fs.copy,
        normalizer=_ExplodingNormalizer(),
    )

    summary = orchestrator.process_many(["a.html", "b.html"])

    assert summary.error_count == 1
    assert summary.processed_count == 1
    assert summary.results[0].error == "cannot normalize"
    assert summary.results[0].hazards == HazardReport.empty()
    assert summary.hazard_totals[HazardCategory.INVISIBLE_BIDI] == 0
    assert fs.writes == []


def test_unexpected_writer_errors_are_captured() -> None:
    """Non-OSError failures from the writer are per-file errors too."""

    fs = FakeFileSystem({"a.html": "<p>\u201cx\u201d</p>"})

    def write(path: str, text: str) -> None:
        raise LookupError("codec missing")

    orchestrator = BatchOrchestrator(BatchConfig(), reader=fs.read, writer=write, copier=fs.copy)

    result = orchestrator.process_one("a.html")

    assert result.status == "errored"
    assert result.error == "codec missing"
    assert result.was_written is False


def test_deeply_nested_file_does_not_abort_the_batch() -> None:
    """Markup nested past the recursion limit should normalize like any other file."""

    nested = "<div>" * 3000 + "\u201cx\u201d" + "</div>" * 3000
    fs = FakeFileSystem({"deep.html": nested, "flat.html": "<p>\u201cy\u201d</p>"})

    summary = _orchestrator(fs).process_many(["deep.html", "flat.html"])

    assert summary.error_count == 0
    assert summary.changed_count == 2
    assert fs.files["deep.html"] == "<div>" * 3000 + '"x"' + "</div>" * 3000


def test_run_task_uses_the_config_carried_by_the_task() -> None:
    """A task's own config decides the write policy for that file."""

    fs = FakeFileSystem({"a.html": "<p>\u201cx\u201d</p>"})

    result = _orchestrator(fs).run_task(FileTask(path="a.html", config=BatchConfig(dry_run=True)))

    assert result.status == "previewed"
    assert result.change_count == 2
    assert fs.writes == []


def test_process_many_aggregates_changes_hazards_and_errors() -> None:
    """Summary counters should cover processed, changed, errored, and hazard totals."""

    fs = FakeFileSystem(
        {
            "a.html": "<p>\u201ca\u201d</p>",
            "b.html": "<p>ok</p>",
            "c.html": "<p>z\u200b</p>",
        }
    )

    summary = _orchestrator(fs).process_many(["a.html", "b.html", "c.html", "missing.html"])

    assert summary.total_files == 4
    assert summary.processed_count == 3
    assert summary.changed_count == 2
    assert summary.error_count == 1
    assert summary.total_changes == 3
    assert summary.hazard_totals[HazardCategory.INVISIBLE_BIDI] == 1
    assert summary.should_fail is False
    assert summary.success is False
    assert [result.path for result in summary.results] == [
        "a.html",
        "b.html",
        "c.html",
        "missing.html",
    ]


def test_process_many_fails_on_invisible_hazards_when_requested() -> None:
    """Invisible characters should flip `should_fail` under the hazard policy."""

    fs = FakeFileSystem({"a.html": "<p>a\u202eb</p>"})

    strict = _orchestrator(fs, fail_on_hazards=True, dry_run=True).process_many(["a.html"])
    lenient = _orchestrator(fs, dry_run=True).process_many(["a.html"])

    assert strict.should_fail is True
    assert strict.success is False
    assert strict.error_count == 0
    assert lenient.should_fail is False
    assert lenient.success is True


def test_attribute_quote_hazards_do_not_trigger_the_failure_policy() -> None:
    """Only invisible/bidi hazards count toward `should_fail`."""

    fs = FakeFileSystem({"a.html": '<img alt="\u201cx\u201d">'})

    summary = _orchestrator(fs, fail_on_hazards=True).process_many(["a.html"])

    assert summary.hazard_totals[HazardCategory.SMART_QUOTES_IN_ATTRIBUTE] == 1
    assert summary.should_fail is False
    assert summary.success is True


def test_process_many_never_exceeds_max_concurrency() -> None:
    """No more than `max_concurrency` files should be in flight at once."""

    lock = threading.Lock()
    in_flight = 0
    peak = 0

    def slow_read(path: str) -> str:
        nonlocal in_flight, peak
        with lock:
            in_flight += 1
            peak = max(peak, in_flight)
        time.sleep(0.02)
        with lock:
            in_flight -= 1
        return "<p>\u201cx\u201d</p>"

    orchestrator = BatchOrchestrator(
        BatchConfig(max_concurrency=2, dry_run=True),
        reader=slow_read,
    )

    summary = orchestrator.process_many([f"f{index}.html" for index in range(8)])

    assert summary.total_files == 8
    assert summary.total_changes == 16
    assert 1 <= peak <= 2


def test_process_patterns_deduplicates_and_sorts_matches() -> None:
    """Overlapping patterns should yield each file once, in sorted order."""

    fs = FakeFileSystem({"b.html": "<p>x</p>", "a.html": "<p>y</p>"})
    fs.listing = {"*.html": ["b.html", "a.html"], "a*": ["a.html"]}

    summary = _orchestrator(fs).process_patterns(["*.html", "a*"])

    assert [result.path for result in summary.results] == ["a.html", "b.html"]
    assert summary.success is True
    assert summary.message is None


def test_process_patterns_uses_configured_patterns_by_default() -> None:
    """Without explicit patterns the config patterns should be expanded."""

    fs = FakeFileSystem({"x.htm": "<p>x</p>"})
    fs.listing = {"*.htm": ["x.htm"]}

    summary = _orchestrator(fs, patterns=("*.htm",)).process_patterns()

    assert summary.total_files == 1


def test_process_patterns_reports_pattern_miss_without_raising() -> None:
    """Zero matching files should be a non-success summary with a message."""

    fs = FakeFileSystem({})

    summary = _orchestrator(fs).process_patterns(["nothing/*.html"])

    assert summary.success is False
    assert summary.total_files == 0
    assert summary.should_fail is False
    assert summary.message == PATTERN_MISS_MESSAGE
    assert summary.hazard_totals == {category: 0 for category in HazardCategory}


def test_process_many_with_no_paths_is_not_a_success() -> None:
    """An empty batch should not report success."""

    summary = _orchestrator(FakeFileSystem({})).process_many([])

    assert summary.total_files == 0
    assert summary.success is False


def test_summarize_results_is_order_independent() -> None:
    """Folding results in any order should produce identical counters."""

    config = BatchConfig(fail_on_hazards=True)
    results = [
        FileResult(path="a", change_count=3, hazards=detect_hazards("\u200b"), status="written"),
        FileResult(path="b", change_count=0, hazards=HazardReport.empty()),
        FileResult(
            path="c",
            change_count=0,
            hazards=HazardReport.empty(),
            error="boom",
            status="errored",
        ),
    ]

    forward = summarize_results(results, config)
    backward = summarize_results(reversed(results), config)

    for field_name in (
        "total_files",
        "processed_count",
        "changed_count",
        "error_count",
        "total_changes",
        "hazard_totals",
        "should_fail",
        "success",
    ):
        assert getattr(forward, field_name) == getattr(backward, field_name)
    assert forward.should_fail is True
    assert forward.total_changes == 3


@pytest.mark.parametrize("max_concurrency", [0, -1])
def test_orchestrator_rejects_invalid_concurrency(max_concurrency: int) -> None:
    """Non-positive pool sizes should fail validation up front."""

    with pytest.raises(ValueError, match="max_concurrency"):
        BatchOrchestrator(BatchConfig(max_concurrency=max_concurrency))
