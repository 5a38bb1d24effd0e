"""jar-rebuilder: reconstruct an editable Maven project from a compiled archive."""

__version__ = "0.1.0"

from jar_rebuilder.archive.walker import ArchiveWalker
from jar_rebuilder.bytecode.extractor import ReferenceExtractor
from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.decompiler.base import DecompilerEngine, DecompilerSink
from jar_rebuilder.decompiler.cfr import CfrDecompiler
from jar_rebuilder.dependencies.resolver import DependencyResolver, resolve
from jar_rebuilder.descriptor.assembler import assemble
from jar_rebuilder.descriptor.writer import serialize
from jar_rebuilder.exceptions import (
    DecompilerFailure,
    InvalidArchive,
    MalformedClassFile,
    RebuilderError,
    WriteError,
)
from jar_rebuilder.pipeline import PipelineRun, RunReport
from jar_rebuilder.placement.engine import SourcePlacementEngine

__all__ = [
    "ArchiveWalker",
    "CfrDecompiler",
    "DecompilerEngine",
    "DecompilerFailure",
    "DecompilerSink",
    "DependencyResolver",
    "InvalidArchive",
    "MalformedClassFile",
    "PipelineRun",
    "RebuilderConfig",
    "RebuilderError",
    "ReferenceExtractor",
    "RunReport",
    "SourcePlacementEngine",
    "WriteError",
    "assemble",
    "resolve",
    "serialize",
]
