"""File writer for scaffold generation. Per-model artifacts are never overwritten."""
import logging
from pathlib import Path
from typing import List

from crmgen.generators.scaffold.errors import ArtifactExistsError, ArtifactWriteError
from crmgen.generators.scaffold.types import GeneratedFile

log = logging.getLogger(__name__)


def _write(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ArtifactWriteError(str(path), e.strerror or str(e)) from e


def write_file(path: Path, content: str) -> None:
    """
    Write a new file, creating parent directories.

    Raises:
        ArtifactExistsError: if ``path`` already exists
        ArtifactWriteError: if the directory or file cannot be written
    """
    if path.exists():
        raise ArtifactExistsError(str(path))
    _write(path, content)


def write_if_absent(path: Path, content: str) -> bool:
    """Write ``content`` only when nothing is at ``path``. Returns whether a file was written."""
    if path.exists():
        return False
    _write(path, content)
    return True


def remove_file(path: Path) -> bool:
    """Best-effort delete. Returns whether a file was removed; failures are logged."""
    try:
        path.unlink()
        return True
    except FileNotFoundError:
        log.info("Artifact already gone", extra={"path": str(path)})
        return False
    except OSError as e:
        log.warning("Failed to remove artifact", extra={"path": str(path), "error": str(e)})
        return False


def write_files(files: List[GeneratedFile], out_dir: Path) -> List[str]:
    """
    Write a batch of per-model files under ``out_dir``.

    Every target is checked before anything is written, so a collision on any
    path leaves the directory untouched.

    Returns:
        Relative paths written, in input order
    """
    for file in files:
        target = out_dir / file.path
        if target.exists():
            raise ArtifactExistsError(file.path)

    written = []
    for file in files:
        write_file(out_dir / file.path, file.content)
        written.append(file.path)
    return written
