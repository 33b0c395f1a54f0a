"""Zip archives of generated artifacts for download."""
import io
import zipfile
from pathlib import Path
from typing import Iterable, Optional


def build_archive(paths: Optional[Iterable[str]], root: Path) -> bytes:
    """
    Zip files under ``root``.

    Args:
        paths: Relative paths to include; None zips every file under ``root``
        root: Directory the paths are relative to

    Returns:
        The archive bytes (deflated). Entries are sorted and missing paths skipped.
    """
    root = Path(root)
    if paths is None:
        names = [p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()]
    else:
        names = [Path(p).as_posix() for p in paths]

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name in sorted(set(names)):
            source = root / name
            if source.is_file():
                archive.write(source, arcname=name)
    return buffer.getvalue()
