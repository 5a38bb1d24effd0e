"""Dependency resolution — infer Maven coordinates for a decompiled archive."""

from jar_rebuilder.dependencies.embedded_pom import parse_embedded_pom
from jar_rebuilder.dependencies.known_packages import BASELINE, KNOWN_PACKAGES
from jar_rebuilder.dependencies.resolver import DependencyResolver, resolve

__all__ = ["BASELINE", "KNOWN_PACKAGES", "DependencyResolver", "parse_embedded_pom", "resolve"]
