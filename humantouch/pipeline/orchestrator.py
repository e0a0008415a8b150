"""Batch orchestration for humantouch.

Responsibilities:
- Drive one file through read, normalize, and the backup/write decision.
- Run many files through a bounded worker pool and aggregate their outcomes.
- Expand glob patterns into a deduplicated, sorted file list.

Key types:
- `BatchOrchestrator`: per-file and batch facade over injected collaborators.
- `summarize_results`: pure, order-independent aggregation into `BatchSummary`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from ..config import BatchConfig
from ..io.files import copy_file, list_files, read_text_file, write_text_file
from ..models.datatypes import BatchSummary, FileResult, FileTask, HazardCategory, HazardReport
from ..telemetry.logger import RunLogger
from ..text.document import DocumentNormalizer
from ..text.hazards import has_significant_hazards

Lister = Callable[[str], Sequence[str]]
Reader = Callable[[str], str]
Writer = Callable[[str, str], None]
Copier = Callable[[str, str], None]

PATTERN_MISS_MESSAGE = "No files found matching patterns"
BACKUP_SUFFIX = ".bak"


class BatchOrchestrator:
    """Normalize files concurrently under one immutable batch config."""

    def __init__(
        self,
        config: BatchConfig | None = None,
        *,
        reader: Reader = read_text_file,
        writer: Writer = write_text_file,
        copier: Copier = copy_file,
        lister: Lister = list_files,
        normalizer: DocumentNormalizer | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        """Initialize with a validated config and filesystem collaborators.

        Raises:
            ValueError: If the config fails validation.
        """

        self.config = config or BatchConfig()
        self.config.validate()
        self.reader = reader
        self.writer = writer
        self.copier = copier
        self.lister = lister
        self.normalizer = normalizer or DocumentNormalizer()
        self.run_logger = run_logger

    def process_one(self, path: str) -> FileResult:
        """Process one file under the orchestrator's config to a terminal `FileResult`."""

        return self.run_task(FileTask(path=path, config=self.config))

    def run_task(self, task: FileTask) -> FileResult:
        """Run one file task to a terminal `FileResult`.

        A failure from any collaborator is captured in the result instead of raised;
        an errored result carries zero changes and an empty hazard report.
        """

        path, config = task.path, task.config
        self._transition(path, "reading")
        try:
            content = self.reader(path)
            self._transition(path, "normalizing")
            document = self.normalizer.normalize_document(content, config.normalizer_config())
        except Exception as exc:
            return self._errored(path, exc)
        changes = document.change_count

        if changes == 0 and not has_significant_hazards(document.hazards):
            return self._finish(FileResult(path=path, change_count=0, hazards=document.hazards))

        if config.dry_run:
            return self._finish(
                FileResult(
                    path=path,
                    change_count=changes,
                    hazards=document.hazards,
                    status="previewed",
                )
            )

        if changes == 0:
            return self._finish(FileResult(path=path, change_count=0, hazards=document.hazards))

        backed_up = False
        try:
            if config.create_backup:
                self.copier(path, path + BACKUP_SUFFIX)
                backed_up = True
            self.writer(path, document.markup)
        except Exception as exc:
            return self._errored(path, exc)

        return self._finish(
            FileResult(
                path=path,
                change_count=changes,
                hazards=document.hazards,
                was_written=True,
                was_backed_up=backed_up,
                status="written",
            )
        )

    def process_many(self, paths: Sequence[str]) -> BatchSummary:
        """Process `paths` with at most `max_concurrency` files in flight.

        Every path reaches a terminal result before aggregation starts.
        """

        if self.run_logger is not None:
            self.run_logger.log_batch_start(len(paths), self.config.max_concurrency)

        tasks = [FileTask(path=path, config=self.config) for path in paths]
        with ThreadPoolExecutor(max_workers=self.config.max_concurrency) as ex:
            results = list(ex.map(self.run_task, tasks))

        summary = summarize_results(results, self.config)
        if self.run_logger is not None:
            self.run_logger.log_batch_complete(
                summary.processed_count,
                summary.changed_count,
                summary.error_count,
                summary.success,
            )
        return summary

    def process_patterns(self, patterns: Sequence[str] | None = None) -> BatchSummary:
        """Expand glob patterns (config patterns by default) and process the matches.

        A pattern set that matches nothing yields a non-success summary carrying
        `PATTERN_MISS_MESSAGE`; it never raises.
        """

        selected = tuple(patterns) if patterns else self.config.patterns
        paths = sorted({path for pattern in selected for path in self.lister(pattern)})
        if not paths:
            if self.run_logger is not None:
                self.run_logger.log_pattern_miss(len(selected))
            return _empty_summary(PATTERN_MISS_MESSAGE)
        return self.process_many(paths)

    def _transition(self, path: str, state: str) -> None:
        if self.run_logger is not None:
            self.run_logger.log_file_transition(path, state)

    def _finish(self, result: FileResult) -> FileResult:
        if self.run_logger is not None:
            self.run_logger.log_file_outcome(result.path, result.status, result.change_count)
        return result

    def _errored(self, path: str, exc: Exception) -> FileResult:
        if self.run_logger is not None:
            self.run_logger.log_file_failure(path, type(exc).__name__)
        return FileResult(
            path=path,
            change_count=0,
            hazards=HazardReport.empty(),
            error=str(exc) or type(exc).__name__,
            status="errored",
        )


def summarize_results(results: Iterable[FileResult], config: BatchConfig) -> BatchSummary:
    """Fold per-file results into a `BatchSummary`; the fold is order-independent."""

    collected = tuple(results)
    succeeded = [result for result in collected if result.error is None]
    hazard_totals = {category: 0 for category in HazardCategory}
    for result in collected:
        for category, count in result.hazards.counts().items():
            hazard_totals[category] += count

    error_count = len(collected) - len(succeeded)
    should_fail = config.fail_on_hazards and hazard_totals[HazardCategory.INVISIBLE_BIDI] > 0
    return BatchSummary(
        total_files=len(collected),
        processed_count=len(succeeded),
        changed_count=sum(1 for result in succeeded if result.change_count > 0),
        error_count=error_count,
        total_changes=sum(result.change_count for result in succeeded),
        hazard_totals=hazard_totals,
        should_fail=should_fail,
        success=not should_fail and error_count == 0 and len(collected) > 0,
        results=collected,
    )


def _empty_summary(message: str) -> BatchSummary:
    return BatchSummary(
        total_files=0,
        processed_count=0,
        changed_count=0,
        error_count=0,
        total_changes=0,
        hazard_totals={category: 0 for category in HazardCategory},
        should_fail=False,
        success=False,
        message=message,
    )
