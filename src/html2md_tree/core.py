from __future__ import annotations

import logging
import time
from pathlib import Path

from .adapters import Adapter, Strategy, get_converter
from .config import AppConfig
from .detection import is_html_file, markdown_name
from .errors import ConversionError
from .logging import RunLogEntry, RunLogger
from .models import ConversionJob, ConversionOptions, ConversionReport, FileFailure
from .utils import list_entries

logger = logging.getLogger(__name__)


class ConversionService:
    def __init__(
        self,
        options: ConversionOptions,
        config: AppConfig | None = None,
        *,
        adapter: Adapter | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._options = options
        self._strategy = Strategy.from_flag(options.use_markitdown)
        self._adapter = adapter or get_converter(self._strategy, self._config.converter)
        self._run_logger = RunLogger(self._config.logging.run_log)
        self._written: set[Path] = set()
        self._target_root: Path | None = None

    @property
    def options(self) -> ConversionOptions:
        return self._options

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    def convert_tree(self) -> ConversionReport:
        source_dir = self._options.source_dir
        target_dir = self._options.target_dir
        report = ConversionReport(
            source_dir=source_dir,
            target_dir=target_dir,
            strategy=self._strategy.value,
        )
        logger.info("Starting conversion from %s to %s", source_dir, target_dir)
        logger.info("Using %s for conversion", self._strategy.description)
        self._written.clear()
        start = time.perf_counter()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            self._target_root = target_dir.resolve()
            self.walk(source_dir, target_dir, Path(), report)
        except (ConversionError, OSError) as exc:
            report.fatal_error = str(exc)
            logger.error("Conversion failed: %s", exc)
        except Exception as exc:
            report.fatal_error = f"{type(exc).__name__}: {exc}"
            logger.exception("Conversion failed: %s", report.fatal_error)
        report.elapsed_s = time.perf_counter() - start
        if report.fatal_error is None:
            logger.info(
                "Conversion completed: %d converted, %d failed, %d skipped in %.2fs",
                len(report.converted),
                len(report.failed),
                len(report.skipped),
                report.elapsed_s,
            )
        return report

    def walk(
        self,
        source_root: Path,
        target_root: Path,
        relative: Path,
        report: ConversionReport,
    ) -> None:
        current_source = source_root / relative
        current_target = target_root / relative
        current_target.mkdir(parents=True, exist_ok=True)

        for entry in self._list_source(current_source):
            entry_relative = relative / entry.name
            if entry.is_dir():
                if entry.resolve() == self._target_root:
                    logger.debug("Skipping target directory inside source: %s", entry_relative)
                    continue
                self.walk(source_root, target_root, entry_relative, report)
            elif entry.is_file() and is_html_file(entry):
                job = ConversionJob(
                    source=entry,
                    target=current_target / markdown_name(entry),
                    relative=entry_relative,
                )
                self._convert_job(job, report)
            else:
                report.skipped.append(entry_relative)

    def _list_source(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            raise ConversionError("SOURCE_NOT_FOUND", f"Source directory does not exist: {directory}")
        try:
            return list_entries(directory)
        except OSError as exc:
            raise ConversionError(
                "SOURCE_UNREADABLE", f"Cannot read source directory {directory}: {exc}"
            ) from exc

    def _convert_job(self, job: ConversionJob, report: ConversionReport) -> None:
        logger.info("Converting %s...", job.relative)
        start = time.perf_counter()
        warnings: list[str] = []
        if job.target in self._written:
            logger.warning("%s overwrites output of an earlier file: %s", job.relative, job.target)
            warnings.append("OUTPUT_OVERWRITTEN")
        try:
            response = self._adapter.convert_file(job.source, job.target, self._options)
        except ConversionError as exc:
            self._record_failure(job, report, exc.code, str(exc), start)
            return
        except Exception as exc:
            self._record_failure(job, report, "CONVERSION_FAILED", str(exc) or type(exc).__name__, start)
            return
        warnings.extend(response.warnings)
        for warning in warnings:
            report.warnings[warning] = report.warnings.get(warning, 0) + 1
        self._written.add(job.target)
        report.converted.append(job.relative)
        logger.info("Successfully converted: %s", job.relative)
        self._run_logger.append(self._log_entry(job, "success", None, None, start, warnings))

    def _record_failure(
        self,
        job: ConversionJob,
        report: ConversionReport,
        code: str,
        message: str,
        start: float,
    ) -> None:
        logger.error("Error converting %s: %s", job.relative, message)
        report.failed.append(FileFailure(relative=job.relative, code=code, message=message))
        self._run_logger.append(self._log_entry(job, "failure", code, message, start))

    def _log_entry(
        self,
        job: ConversionJob,
        status: str,
        code: str | None,
        message: str | None,
        start: float,
        warnings: list[str] | None = None,
    ) -> RunLogEntry:
        return RunLogEntry(
            source=str(job.source),
            target=str(job.target),
            relative=job.relative.as_posix(),
            status=status,
            strategy=self._strategy.value,
            error_code=code,
            message=message,
            warnings=list(warnings or []),
            elapsed_ms=(time.perf_counter() - start) * 1000,
        )


def convert_html_tree(
    source_dir: Path | str,
    target_dir: Path | str,
    *,
    use_markitdown: bool = False,
    domain: str = "",
    config: AppConfig | None = None,
) -> ConversionReport:
    options = ConversionOptions(
        source_dir=Path(source_dir),
        target_dir=Path(target_dir),
        use_markitdown=use_markitdown,
        domain=domain,
    )
    return ConversionService(options, config).convert_tree()


__all__ = [
    "ConversionError",
    "ConversionService",
    "convert_html_tree",
]
