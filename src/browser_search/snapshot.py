"""Point-in-time copies of browser databases that a live browser may hold locked."""

from __future__ import annotations

import logging
import shutil
import sqlite3
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from browser_search.exceptions import SnapshotFailed, SourceUnavailable

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".db"
DEFAULT_PREFIX = "browser-search-"


@contextmanager
def snapshot(
    source_path: Path,
    reuse_dir: Path | None = None,
    reuse_prefix: str | None = None,
) -> Iterator[sqlite3.Connection]:
    """Yield a connection to a fresh, integrity-checked copy of `source_path`.

    Without `reuse_dir` the copy lives in the system temp directory and is
    removed when the block exits. With `reuse_dir`, the previous run's copy
    (the first file there named `reuse_prefix*`) seeds the new one, and the
    new copy is kept after a successful block so the next run can skip the
    copy when the source has not changed size. A copy that failed is always
    removed.

    Raises:
        SourceUnavailable: `source_path` does not exist.
        SnapshotFailed: the source could not be read or copied.
    """
    prefix = reuse_prefix or DEFAULT_PREFIX
    if reuse_dir is not None:
        try:
            reuse_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SnapshotFailed(f"Cannot create snapshot directory {reuse_dir}: {e}") from e

    try:
        source_size = source_path.stat().st_size
    except FileNotFoundError as e:
        raise SourceUnavailable(f"{source_path} disappeared") from e
    except OSError as e:
        raise SnapshotFailed(f"Cannot read {source_path}: {e}") from e

    temp_path = _allocate(reuse_dir, prefix)
    keep = False
    conn: sqlite3.Connection | None = None
    try:
        if reuse_dir is not None:
            _adopt_previous(reuse_dir, prefix, temp_path)

        if _needs_copy(source_size, temp_path):
            try:
                shutil.copyfile(source_path, temp_path)
            except OSError as e:
                raise SnapshotFailed(f"Failed to copy {source_path}: {e}") from e
            logger.debug("Copied %s -> %s", source_path, temp_path)
        else:
            logger.debug("Reusing snapshot %s for %s", temp_path, source_path)

        try:
            conn = sqlite3.connect(str(temp_path))
        except sqlite3.Error as e:
            raise SnapshotFailed(f"Cannot open snapshot of {source_path}: {e}") from e
        conn.row_factory = sqlite3.Row

        yield conn
        keep = reuse_dir is not None
    finally:
        if conn is not None:
            conn.close()
        if not keep:
            temp_path.unlink(missing_ok=True)


def _allocate(reuse_dir: Path | None, prefix: str) -> Path:
    try:
        with tempfile.NamedTemporaryFile(
            prefix=prefix,
            suffix=SNAPSHOT_SUFFIX,
            dir=reuse_dir,
            delete=False,
        ) as tmp:
            return Path(tmp.name)
    except OSError as e:
        raise SnapshotFailed(f"Cannot allocate snapshot file: {e}") from e


def _adopt_previous(reuse_dir: Path, prefix: str, temp_path: Path) -> None:
    """Copy the previous snapshot over the new file, then drop the stale one."""
    stale = _find_previous(reuse_dir, prefix, exclude=temp_path)
    if stale is None:
        return
    try:
        shutil.copyfile(stale, temp_path)
    except OSError as e:
        logger.debug("Could not adopt previous snapshot %s: %s", stale, e)
    finally:
        stale.unlink(missing_ok=True)


def _find_previous(reuse_dir: Path, prefix: str, exclude: Path) -> Path | None:
    try:
        candidates = sorted(
            p for p in reuse_dir.iterdir()
            if p.name.startswith(prefix) and p != exclude and p.is_file()
        )
    except OSError:
        return None
    return candidates[0] if candidates else None


def _needs_copy(source_size: int, temp_path: Path) -> bool:
    """Copy unless the existing snapshot matches in size and passes a probe."""
    try:
        if temp_path.stat().st_size != source_size or source_size == 0:
            return True
    except OSError:
        return True
    return not _passes_integrity_probe(temp_path)


def _passes_integrity_probe(path: Path) -> bool:
    conn: sqlite3.Connection | None = None
    try:
        conn = sqlite3.connect(f"file:{path}?mode=ro", uri=True)
        row = conn.execute("PRAGMA quick_check").fetchone()
        return bool(row) and row[0] == "ok"
    except sqlite3.Error:
        return False
    finally:
        if conn is not None:
            conn.close()
