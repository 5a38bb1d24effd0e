"""Run configuration — defaults in code, overridable via JAR_REBUILDER_* env vars."""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, field_validator

_ENV_PREFIX = "JAR_REBUILDER_"

# Vendored framework packages and archive metadata never reach the extractor
# or the placement engine.
DEFAULT_EXCLUDED_PREFIXES: tuple[str, ...] = (
    "META-INF/",
    "org/springframework/",
    "BOOT-INF/lib/",
    "WEB-INF/lib/",
)

DEFAULT_EMBEDDED_CLASS_ROOTS: tuple[str, ...] = (
    "BOOT-INF/classes/",
    "WEB-INF/classes/",
)

DEFAULT_ARCHIVE_EXTENSIONS: tuple[str, ...] = (".jar", ".war")

# Fields that are read as comma-separated lists from the environment.
_LIST_FIELDS = {"excluded_prefixes", "embedded_class_roots", "archive_extensions"}


class RebuilderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    excluded_prefixes: tuple[str, ...] = DEFAULT_EXCLUDED_PREFIXES
    embedded_class_roots: tuple[str, ...] = DEFAULT_EMBEDDED_CLASS_ROOTS
    archive_extensions: tuple[str, ...] = DEFAULT_ARCHIVE_EXTENSIONS

    # Project identity defaults
    group_id: str = "com.decompiled"
    version: str = "1.0-SNAPSHOT"
    source_encoding: str = "UTF-8"
    language_level: str = "1.8"

    # Decompiler
    cfr_jar: str | None = None
    java_bin: str = "java"
    decompile_timeout: float = 60.0

    @field_validator("excluded_prefixes", "embedded_class_roots", mode="after")
    @classmethod
    def _normalize_dirs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        # Directory prefixes always end with "/" so "org/spring" never
        # matches "org/springframework".
        return tuple(p if p.endswith("/") else f"{p}/" for p in v if p)

    @field_validator("archive_extensions", mode="after")
    @classmethod
    def _normalize_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("at least one archive extension is required")
        return tuple(e.lower() if e.startswith(".") else f".{e.lower()}" for e in v)

    @field_validator("decompile_timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("decompile_timeout must be positive")
        return v

    @classmethod
    def from_env(cls, **overrides: object) -> RebuilderConfig:
        """Build a config from ``JAR_REBUILDER_<FIELD>`` variables.

        List fields take comma-separated values, e.g.
        ``JAR_REBUILDER_EXCLUDED_PREFIXES=META-INF/,com/vendor/``.
        Explicit *overrides* (e.g. CLI options) win; ``None`` overrides are ignored.
        """
        values: dict[str, object] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{_ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            if name in _LIST_FIELDS:
                values[name] = tuple(part.strip() for part in raw.split(",") if part.strip())
            else:
                values[name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
