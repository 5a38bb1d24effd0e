"""Custom exceptions for jar-rebuilder."""

from __future__ import annotations


class RebuilderError(Exception):
    """Base exception for all rebuild errors."""


class InvalidArchive(RebuilderError):
    """Raised when the input path is missing or is not a readable archive."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid archive {path}: {reason}")


class MalformedClassFile(RebuilderError):
    """Raised when a class file's structure is inconsistent.

    Local to one class: the pipeline logs it and moves on.
    """


class DecompilerFailure(RebuilderError):
    """Raised when the decompiler cannot produce source for one class."""


class WriteError(RebuilderError):
    """Raised when a directory, source file or descriptor cannot be written."""

    def __init__(self, path: str, cause: BaseException | None = None):
        self.path = path
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to write {path}{detail}")
