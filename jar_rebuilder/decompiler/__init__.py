"""Decompiler engine bridge."""

from jar_rebuilder.decompiler.base import DECOMPILER_OPTIONS, DecompilerEngine, DecompilerSink
from jar_rebuilder.decompiler.cfr import CfrDecompiler

__all__ = ["DECOMPILER_OPTIONS", "CfrDecompiler", "DecompilerEngine", "DecompilerSink"]
