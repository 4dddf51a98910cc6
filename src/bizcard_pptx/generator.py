"""Batch business card generation.

This module provides the primary interface for turning a card template and
a list of records into a ZIP archive of personalized .pptx files.

Pipeline flow:
    1. Validate inputs (record count, batch size, template size/signature)
    2. For each record: decode a fresh copy of the template, merge the
       record into every slide, write the card into a scratch directory
    3. Package every generated card into one ZIP archive
    4. Remove the scratch directory, whatever the outcome
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
import uuid
import zipfile
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence

from .config import ProcessingOptions
from .document import TemplateSource, load_document, save_document, validate_template
from .errors import BizCardError, CardGenerationError, ErrorCode, format_error
from .images import ImageGenerator
from .models import BatchResult, Record, RecordOutcome
from .placeholder_resolver import DEFAULT_POLICY, FormattingPolicy
from .shape_ids import ShapeIdAllocator, default_allocator
from .substitution import MergeContext, process_presentation

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]

# Share of the progress range used by per-record generation; the rest
# is reserved for packaging
GENERATION_PROGRESS_SHARE = 90

# Characters replaced by '_' in generated filenames
_UNSAFE_FILENAME_CHARS = (" ", "/", "\\", ":")


def safe_filename(record: Record, timestamp: datetime) -> str:
    """Build the output filename for a record's card."""
    filename = f"{record.name}_{record.company}_{timestamp:%Y%m%d_%H%M%S}.pptx"
    for ch in _UNSAFE_FILENAME_CHARS:
        filename = filename.replace(ch, "_")
    return filename


def _unique_filename(filename: str, taken: set[str]) -> str:
    if filename not in taken:
        return filename
    stem, suffix = filename.rsplit(".", 1)
    counter = 2
    while f"{stem}_{counter}.{suffix}" in taken:
        counter += 1
    return f"{stem}_{counter}.{suffix}"


class CardGenerator:
    """Orchestrates batch generation of business cards from a template.

    Each record is merged into its own freshly decoded copy of the template
    and reported as a ``RecordOutcome``; one bad record never aborts the
    batch. Records run sequentially, or on a thread pool when
    ``options.max_workers`` is greater than one.
    """

    def __init__(
        self,
        options: Optional[ProcessingOptions] = None,
        image_generator: Optional[ImageGenerator] = None,
        id_allocator: Optional[ShapeIdAllocator] = None,
        policy: Optional[FormattingPolicy] = None,
    ):
        """Initialize the generator.

        Args:
            options: Processing limits; defaults apply when omitted.
            image_generator: Renders the ``{qrcode}`` image for a record.
                Without one, image lines are removed from the cards.
            id_allocator: Shape id source for inserted pictures.
            policy: Contact formatting and role-title rules.
        """
        self.options = options or ProcessingOptions()
        self.image_generator = image_generator
        self.id_allocator = id_allocator or default_allocator
        self.policy = policy or DEFAULT_POLICY

    def _context(self) -> MergeContext:
        return MergeContext(
            policy=self.policy,
            image_generator=self.image_generator,
            id_allocator=self.id_allocator,
        )

    def generate_card(self, record: Record, template_bytes: bytes) -> tuple[bytes, int]:
        """Merge one record into a fresh copy of the template.

        Returns:
            Tuple of (pptx bytes, replacement count).

        Raises:
            BizCardError: If the record is invalid or the template cannot
                be processed.
        """
        record.validate()
        prs = load_document(template_bytes)
        try:
            replacements = process_presentation(prs, record, self._context())
            return save_document(prs), replacements
        except MemoryError:
            raise
        except Exception as e:
            raise CardGenerationError(str(e)) from e

    def _generate_one(
        self,
        record: Record,
        template_bytes: bytes,
        output_path: Path,
    ) -> RecordOutcome:
        """Generate and write one card, folding any failure into the outcome.

        Write failures (OSError) and MemoryError are batch-level and propagate.
        """
        try:
            data, replacements = self.generate_card(record, template_bytes)
        except BizCardError as e:
            return self._failed(record, output_path, e.details or str(e))

        output_path.write_bytes(data)
        logger.debug(f"Generated card for {record.name} ({replacements} replacements)")
        return RecordOutcome(
            record_name=record.name,
            filename=output_path.name,
            success=True,
            output_path=output_path,
            replacements=replacements,
        )

    def _failed(self, record: Record, output_path: Path, reason: str) -> RecordOutcome:
        logger.warning(f"Failed to generate card for {record.name}: {reason}")
        return RecordOutcome(
            record_name=record.name,
            filename=output_path.name,
            success=False,
            error=f"{record.name}: {reason}",
        )

    def _check_preconditions(self, records: Sequence[Record]) -> Optional[BatchResult]:
        if not records:
            return BatchResult.failure(
                format_error(ErrorCode.NO_RECORDS_PROVIDED), ErrorCode.NO_RECORDS_PROVIDED
            )

        if len(records) > self.options.max_batch_size:
            details = f"Provided {len(records)} records, maximum is {self.options.max_batch_size}."
            return BatchResult.failure(
                format_error(ErrorCode.BATCH_SIZE_EXCEEDED, details), ErrorCode.BATCH_SIZE_EXCEEDED
            )

        return None

    def generate_batch(
        self,
        records: Sequence[Record],
        template: TemplateSource,
        progress: Optional[ProgressCallback] = None,
        deadline: Optional[float] = None,
    ) -> BatchResult:
        """Generate one card per record and package them into a ZIP archive.

        Args:
            records: Records to generate cards for.
            template: Template bytes, path, or seekable binary stream.
            progress: Optional callback receiving 0-100.
            deadline: Overall time limit in seconds (defaults to
                ``options.batch_timeout_seconds``). Records not finished in
                time are reported as failures; finished ones are archived.

        Returns:
            BatchResult. ``success`` is True when at least one card was
            generated; per-record failures are listed in ``errors``.
        """
        precondition = self._check_preconditions(records)
        if precondition is not None:
            logger.warning(precondition.error_message)
            return precondition

        timeout = deadline if deadline is not None else self.options.batch_timeout_seconds
        scratch_dir: Optional[Path] = None
        archive_path: Optional[Path] = None

        try:
            logger.info(f"Starting batch card generation for {len(records)} records")

            template_bytes = validate_template(template, self.options.max_template_file_size_bytes)

            scratch_dir = Path(tempfile.mkdtemp(prefix="bizcards_"))
            logger.debug(f"Scratch directory: {scratch_dir}")

            outcomes = self._run_records(records, template_bytes, scratch_dir, progress, timeout)

            generated = [o for o in outcomes if o.success]
            errors = [o.error for o in outcomes if not o.success and o.error]

            if not generated:
                message = format_error(
                    ErrorCode.POWERPOINT_PROCESSING_FAILED, "All business card generation failed."
                )
                logger.error("All business card generation failed")
                result = BatchResult.failure(message, ErrorCode.POWERPOINT_PROCESSING_FAILED)
                result.failed_count = len(errors)
                result.errors = errors
                return result

            archive_path = self._archive_path()
            write_archive([o.output_path for o in generated], archive_path)
            logger.info(f"Created zip file: {archive_path}")

            if progress:
                progress(100)

            return BatchResult(
                success=True,
                generated_count=len(generated),
                failed_count=len(errors),
                archive_path=archive_path,
                generated_files=[o.filename for o in generated],
                errors=errors,
            )

        except MemoryError:
            logger.error("Out of memory while generating business cards")
            self._discard(archive_path)
            return BatchResult.failure(format_error(ErrorCode.OUT_OF_MEMORY), ErrorCode.OUT_OF_MEMORY)
        except PermissionError as e:
            logger.error(f"Permission denied during business card generation: {e}")
            self._discard(archive_path)
            return BatchResult.failure(format_error(ErrorCode.PERMISSION_DENIED, str(e)), ErrorCode.PERMISSION_DENIED)
        except OSError as e:
            logger.error(f"IO error during business card generation: {e}")
            self._discard(archive_path)
            return BatchResult.failure(format_error(ErrorCode.IO_ERROR, str(e)), ErrorCode.IO_ERROR)
        except BizCardError as e:
            logger.error(f"Business card processing error: {e.code.value}")
            self._discard(archive_path)
            return BatchResult.failure(str(e), e.code)
        except Exception as e:
            logger.exception("Unexpected error during business card generation")
            self._discard(archive_path)
            return BatchResult.failure(format_error(ErrorCode.UNEXPECTED_ERROR, str(e)), ErrorCode.UNEXPECTED_ERROR)
        finally:
            if scratch_dir is not None and scratch_dir.exists():
                try:
                    shutil.rmtree(scratch_dir)
                    logger.debug(f"Cleaned up scratch directory: {scratch_dir}")
                except OSError as e:
                    logger.warning(f"Failed to clean up scratch directory {scratch_dir}: {e}")

    def _run_records(
        self,
        records: Sequence[Record],
        template_bytes: bytes,
        scratch_dir: Path,
        progress: Optional[ProgressCallback],
        timeout: Optional[float],
    ) -> list[RecordOutcome]:
        """Process every record, sequentially or on a worker pool."""
        timestamp = datetime.now()
        taken: set[str] = set()
        jobs: list[tuple[Record, Path]] = []
        for record in records:
            filename = _unique_filename(safe_filename(record, timestamp), taken)
            taken.add(filename)
            jobs.append((record, scratch_dir / filename))

        total = len(jobs)
        started = time.monotonic()

        def report(done: int):
            if progress:
                progress(done * GENERATION_PROGRESS_SHARE // total)

        if self.options.max_workers <= 1:
            outcomes = []
            for record, path in jobs:
                if timeout is not None and time.monotonic() - started > timeout:
                    outcomes.append(self._abandoned(record, path))
                    report(len(outcomes))
                    continue
                outcomes.append(self._generate_one(record, template_bytes, path))
                report(len(outcomes))
            return outcomes

        return self._run_pool(jobs, template_bytes, report, started, timeout)

    def _run_pool(
        self,
        jobs: list[tuple[Record, Path]],
        template_bytes: bytes,
        report: Callable[[int], None],
        started: float,
        timeout: Optional[float],
    ) -> list[RecordOutcome]:
        outcomes: dict[int, RecordOutcome] = {}
        executor = ThreadPoolExecutor(max_workers=self.options.max_workers, thread_name_prefix="bizcard")
        try:
            futures: dict[Future, int] = {
                executor.submit(self._generate_one, record, template_bytes, path): idx
                for idx, (record, path) in enumerate(jobs)
            }
            pending = set(futures)
            while pending:
                remaining = None
                if timeout is not None:
                    remaining = timeout - (time.monotonic() - started)
                    if remaining <= 0:
                        break
                done, pending = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
                for future in done:
                    outcomes[futures[future]] = future.result()
                report(len(outcomes))

            for future in pending:
                future.cancel()
                idx = futures[future]
                outcomes[idx] = self._abandoned(*jobs[idx])
        finally:
            # In-flight records past the deadline are not waited for
            executor.shutdown(wait=timeout is None, cancel_futures=True)

        return [outcomes[idx] for idx in range(len(jobs))]

    def _abandoned(self, record: Record, path: Path) -> RecordOutcome:
        return self._failed(record, path, "Abandoned: batch deadline exceeded.")

    def _archive_path(self) -> Path:
        output_dir = Path(self.options.output_dir) if self.options.output_dir else Path(tempfile.gettempdir())
        output_dir.mkdir(parents=True, exist_ok=True)
        return output_dir / f"BusinessCards_{datetime.now():%Y%m%d_%H%M%S}_{uuid.uuid4().hex}.zip"

    @staticmethod
    def _discard(path: Optional[Path]):
        if path is not None and path.exists():
            try:
                path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove partial archive {path}: {e}")


def write_archive(files: Sequence[Path], archive_path: Path) -> Path:
    """Write files into a deflate-compressed ZIP, one entry per file name.

    Args:
        files: Files to package.
        archive_path: Destination ZIP path.

    Returns:
        The archive path.
    """
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for file_path in files:
            zf.write(file_path, arcname=Path(file_path).name)
    return archive_path


def generate_batch(
    records: Sequence[Record],
    template: TemplateSource,
    progress: Optional[ProgressCallback] = None,
    options: Optional[ProcessingOptions] = None,
    image_generator: Optional[ImageGenerator] = None,
    id_allocator: Optional[ShapeIdAllocator] = None,
    policy: Optional[FormattingPolicy] = None,
    deadline: Optional[float] = None,
) -> BatchResult:
    """Generate a batch of cards with a one-off CardGenerator."""
    generator = CardGenerator(
        options=options,
        image_generator=image_generator,
        id_allocator=id_allocator,
        policy=policy,
    )
    return generator.generate_batch(records, template, progress=progress, deadline=deadline)
