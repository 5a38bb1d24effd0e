"""Parser for JAR manifests (META-INF/MANIFEST.MF)."""

from __future__ import annotations


def parse_main_attributes(content: str) -> dict[str, str]:
    """Parse the manifest main section into a name -> value mapping.

    Lines starting with a single space continue the previous value (the
    manifest format wraps at 72 bytes). The main section ends at the first
    blank line.
    """
    attributes: dict[str, str] = {}
    current: str | None = None
    for line in content.splitlines():
        if not line.strip():
            if attributes:
                break
            continue
        if line.startswith(" ") and current is not None:
            attributes[current] += line[1:]
            continue
        name, sep, value = line.partition(":")
        if not sep:
            current = None
            continue
        current = name.strip()
        attributes[current] = value[1:] if value.startswith(" ") else value
    return attributes


def parse_class_path(content: str) -> list[str]:
    """Return the space-separated tokens of the ``Class-Path`` attribute."""
    attributes = parse_main_attributes(content)
    value = next((v for k, v in attributes.items() if k.lower() == "class-path"), "")
    return value.split()
