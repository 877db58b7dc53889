import logging
import os
import tempfile
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from image_codemod.core.config import DEFAULT_EXTENSIONS, IGNORED_DIRECTORIES
from image_codemod.core.errors import CodemodError
from image_codemod.core.languages import is_supported_file
from image_codemod.core.transform import transform_file
from image_codemod.models import BatchSummary, FileReport, FileStatus

logger = logging.getLogger(__name__)


def _suffixes(extensions: Iterable[str]) -> frozenset[str]:
    return frozenset(f".{ext.strip().lstrip('.').lower()}" for ext in extensions if ext.strip())


def _is_ignored(path: Path, root: Path) -> bool:
    relative = path.relative_to(root) if path.is_relative_to(root) else path
    return any(part in IGNORED_DIRECTORIES for part in relative.parts[:-1])


def discover_files(target: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> list[Path]:
    """Collect the source files under ``target`` the codemod should visit."""
    if not target.exists():
        raise FileNotFoundError(f"Target not found: {target}")
    suffixes = _suffixes(extensions)
    if target.is_file():
        return [target] if is_supported_file(target, suffixes) else []
    return sorted(
        path
        for path in target.rglob("*")
        if path.is_file() and is_supported_file(path, suffixes) and not _is_ignored(path, target)
    )


def write_atomic(path: Path, text: str) -> None:
    """Replace the file's contents in one step so a reader never sees a partial write."""
    with tempfile.NamedTemporaryFile("wb", dir=path.parent, prefix=f".{path.name}.", delete=False) as handle:
        handle.write(text.encode("utf-8"))
        temp_path = Path(handle.name)
    try:
        os.chmod(temp_path, path.stat().st_mode)
        os.replace(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def run_file(path: Path, dry_run: bool = False) -> FileReport:
    try:
        result = transform_file(path)
        if result.changed and not dry_run:
            write_atomic(path, result.source)
    except (CodemodError, OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to transform %s: %s", path, exc)
        return FileReport(path=str(path), status=FileStatus.FAILED, error=str(exc))
    except Exception as exc:
        logger.exception("Unexpected error while transforming %s", path)
        return FileReport(path=str(path), status=FileStatus.FAILED, error=f"{type(exc).__name__}: {exc}")

    status = FileStatus.CHANGED if result.changed else FileStatus.UNCHANGED
    return FileReport(path=str(path), status=status, notices=result.notices)


def run_batch(
    target: Path,
    dry_run: bool = False,
    max_workers: int | None = None,
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
) -> BatchSummary:
    """Transform every discovered file; one file's failure never stops the others."""
    files = discover_files(target, extensions)
    logger.info("Processing %d file(s) under %s", len(files), target)

    reports: list[FileReport] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(run_file, path, dry_run) for path in files]
        for future in as_completed(futures):
            reports.append(future.result())

    reports.sort(key=lambda report: report.path)
    return BatchSummary(target=str(target), dry_run=dry_run, reports=reports)
