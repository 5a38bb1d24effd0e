"""Maven project descriptor assembly and serialization."""

from jar_rebuilder.descriptor.assembler import assemble, default_identity
from jar_rebuilder.descriptor.writer import POM_FILENAME, render, serialize

__all__ = ["POM_FILENAME", "assemble", "default_identity", "render", "serialize"]
