"""Structured editing of the index files that register generated models.

An index file holds managed blocks delimited by marker comments::

    # <generated:imports>
    from models.task_model import Task  # model: task
    # </generated:imports>

Each line inside a block is an entry tagged with the model it belongs to.
The document is parsed into ordered entries and serialised back; everything
outside the blocks is kept as-is.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from crmgen.generators.scaffold.errors import ArtifactWriteError, IndexFormatError

log = logging.getLogger(__name__)

IMPORTS = "imports"
REGISTRATIONS = "registrations"

_START_RE = re.compile(r"^(?P<indent>[ \t]*)# <generated:(?P<block>[a-z_]+)>[ \t]*$")
_END_RE = re.compile(r"^[ \t]*# </generated:(?P<block>[a-z_]+)>[ \t]*$")
_ENTRY_RE = re.compile(r"^(?P<code>.*?)[ \t]+# model: (?P<name>[A-Za-z0-9_]+)[ \t]*$")


def block_start(block: str, indent: str = "") -> str:
    return f"{indent}# <generated:{block}>"


def block_end(block: str, indent: str = "") -> str:
    return f"{indent}# </generated:{block}>"


@dataclass
class ManagedBlock:
    name: str
    indent: str = ""
    entries: List[Tuple[Optional[str], str]] = field(default_factory=list)  # (model name, code)

    def names(self) -> List[str]:
        return [n for n, _ in self.entries if n]

    def lines(self) -> List[str]:
        out = [block_start(self.name, self.indent)]
        for name, code in self.entries:
            if name:
                out.append(f"{self.indent}{code}  # model: {name}")
            else:
                out.append(f"{self.indent}{code}" if code else "")
        out.append(block_end(self.name, self.indent))
        return out


class IndexDocument:
    """An index file split into verbatim text and managed blocks."""

    def __init__(self, parts: List[Union[str, ManagedBlock]], trailing_newline: bool = True, source: str = "<index>"):
        self.parts = parts
        self.trailing_newline = trailing_newline
        self.source = source

    @classmethod
    def parse(cls, text: str, source: str = "<index>") -> "IndexDocument":
        parts: List[Union[str, ManagedBlock]] = []
        current: Optional[ManagedBlock] = None
        for line in text.splitlines():
            if current is None:
                start = _START_RE.match(line)
                if start:
                    current = ManagedBlock(start.group("block"), start.group("indent"))
                else:
                    parts.append(line)
                continue

            end = _END_RE.match(line)
            if end:
                if end.group("block") != current.name:
                    raise IndexFormatError(source, f"block '{current.name}' closed by '{end.group('block')}'")
                parts.append(current)
                current = None
                continue

            entry = _ENTRY_RE.match(line)
            if entry:
                current.entries.append((entry.group("name"), entry.group("code").strip()))
            else:
                current.entries.append((None, line.strip()))

        if current is not None:
            raise IndexFormatError(source, f"block '{current.name}' is never closed")
        return cls(parts, trailing_newline=text.endswith("\n"), source=source)

    def serialize(self) -> str:
        lines: List[str] = []
        for part in self.parts:
            if isinstance(part, ManagedBlock):
                lines.extend(part.lines())
            else:
                lines.append(part)
        text = "\n".join(lines)
        return text + "\n" if self.trailing_newline else text

    def block(self, name: str) -> Optional[ManagedBlock]:
        for part in self.parts:
            if isinstance(part, ManagedBlock) and part.name == name:
                return part
        return None

    def add(self, block_name: str, name: str, code: str) -> bool:
        """Append an entry to a block. Returns False if the model or the exact line is already there."""
        block = self.block(block_name)
        if block is None:
            raise IndexFormatError(self.source, f"no '{block_name}' block")
        for existing_name, existing_code in block.entries:
            if existing_name == name or existing_code == code:
                return False
        block.entries.append((name, code))
        return True

    def remove(self, name: str) -> bool:
        removed = False
        for part in self.parts:
            if isinstance(part, ManagedBlock):
                kept = [(n, c) for n, c in part.entries if n != name]
                if len(kept) != len(part.entries):
                    part.entries = kept
                    removed = True
        return removed


def _load(path: Path) -> IndexDocument:
    return IndexDocument.parse(path.read_text(encoding="utf-8"), source=str(path))


def _save(path: Path, document: IndexDocument) -> None:
    try:
        path.write_text(document.serialize(), encoding="utf-8")
    except OSError as e:
        raise ArtifactWriteError(str(path), e.strerror or str(e)) from e


def register(path: Path, name: str, import_line: str, registration_line: Optional[str] = None) -> bool:
    """
    Register a model in an index file.

    Idempotent: a model already present (by name or by identical line) is left
    alone. New entries go at the end of their block.

    Returns:
        True if the file changed
    """
    if not path.exists():
        raise ArtifactWriteError(str(path), "index file does not exist")
    document = _load(path)
    changed = document.add(IMPORTS, name, import_line)
    if registration_line is not None:
        changed = document.add(REGISTRATIONS, name, registration_line) or changed
    if changed:
        _save(path, document)
        log.info("Registered model in index", extra={"model": name, "path": str(path)})
    return changed


def unregister(path: Path, name: str) -> bool:
    """Remove every entry for ``name``. A missing file or entry is a no-op."""
    if not path.exists():
        return False
    document = _load(path)
    if not document.remove(name):
        return False
    _save(path, document)
    log.info("Unregistered model from index", extra={"model": name, "path": str(path)})
    return True
