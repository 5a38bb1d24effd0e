"""CFR decompiler backend — runs ``java -jar cfr.jar`` per class."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path, PurePosixPath

import structlog

from jar_rebuilder.decompiler.base import DECOMPILER_OPTIONS, DecompilerSink
from jar_rebuilder.exceptions import DecompilerFailure

log = structlog.get_logger("jar_rebuilder.decompiler")


class CfrDecompiler:
    """Decompile single classes with the CFR command-line tool.

    Each class is copied to a scratch directory and CFR is pointed at it
    with ``--outputdir``; every ``.java`` file it emits is pushed to the sink
    with its output-relative path as the hint.
    """

    name = "cfr"

    def __init__(
        self,
        cfr_jar: str | Path,
        java_bin: str = "java",
        timeout: float = 60.0,
        options: dict[str, str] | None = None,
    ) -> None:
        self.cfr_jar = Path(cfr_jar)
        self.java_bin = java_bin
        self.timeout = timeout
        self.options = dict(DECOMPILER_OPTIONS if options is None else options)

    def command(self, class_path: Path, output_dir: Path) -> list[str]:
        cmd = [self.java_bin, "-jar", str(self.cfr_jar), str(class_path), "--outputdir", str(output_dir)]
        for key, value in self.options.items():
            cmd.extend([f"--{key}", value])
        return cmd

    def decompile(self, class_bytes: bytes, entry_name: str, sink: DecompilerSink) -> int:
        if not self.cfr_jar.is_file():
            raise DecompilerFailure(f"CFR jar not found: {self.cfr_jar}")

        with tempfile.TemporaryDirectory(prefix="jar-rebuild-cfr-") as tmpdir:
            work = Path(tmpdir)
            class_path = work / PurePosixPath(entry_name).name
            class_path.write_bytes(class_bytes)
            output_dir = work / "out"

            cmd = self.command(class_path, output_dir)
            try:
                result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
            except subprocess.TimeoutExpired as e:
                raise DecompilerFailure(f"CFR timed out after {self.timeout}s on {entry_name}") from e
            except FileNotFoundError as e:
                raise DecompilerFailure(f"java executable not found: {self.java_bin}") from e

            if result.returncode != 0:
                raise DecompilerFailure(
                    f"CFR failed on {entry_name} (rc={result.returncode}): {result.stderr[-1000:]}"
                )

            pushed = 0
            for source in sorted(output_dir.rglob("*.java")) if output_dir.exists() else []:
                sink.accept(
                    source.read_text(encoding="utf-8", errors="replace"),
                    source.relative_to(output_dir).as_posix(),
                )
                pushed += 1

        if not pushed:
            log.debug("decompiler.no_output", entry=entry_name)
        return pushed
