"""Error taxonomy for scaffold generation."""
from typing import Dict, List


class ScaffoldError(Exception):
    """Base class for generator failures."""


class SpecValidationError(ScaffoldError):
    """The ModelSpec is malformed. Raised before any file I/O."""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        summary = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Invalid model spec: {summary}")


class ArtifactExistsError(ScaffoldError):
    """A per-model artifact is already on disk. Rename the model or tear it down first."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Artifact {path} already exists")


class ArtifactWriteError(ScaffoldError):
    """Creating a directory or writing a file failed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write {path}: {reason}")


class IndexFormatError(ScaffoldError):
    """An index file is missing a managed block or has an unterminated one."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Index {path} is malformed: {reason}")
