"""Decompiler engine interface.

The engine is an opaque collaborator: given one class file it pushes zero
or more ``(text, hint)`` blobs to a sink. Naming policy belongs to the sink.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

# Fixed engine options, in CFR's option vocabulary.
DECOMPILER_OPTIONS: dict[str, str] = {
    "showversion": "false",
    "decodestringswitch": "true",
    "sugarenums": "true",
    "decodelambdas": "true",
    "hidebridgemethods": "true",
}


@runtime_checkable
class DecompilerSink(Protocol):
    """Receives decompiled compilation units."""

    def accept(self, text: str, hint: str | None = None) -> object: ...


@runtime_checkable
class DecompilerEngine(Protocol):
    """Interface that every decompiler backend must satisfy."""

    name: str

    def decompile(self, class_bytes: bytes, entry_name: str, sink: DecompilerSink) -> int:
        """Decompile one class and push results to *sink*.

        Returns the number of blobs pushed.

        Raises:
            DecompilerFailure: the engine could not process this class.
        """
        ...
