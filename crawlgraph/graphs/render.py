"""PNG rendering of DOT files through the Graphviz command line tools."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

DEFAULT_ENGINES: tuple[str, ...] = ("sfdp", "dot")
DEFAULT_DPI = 200


class GraphRenderer:
    """Runs Graphviz layout engines in order until one succeeds.

    A missing binary or a non-zero exit moves on to the next engine. When all
    engines fail the failure is logged and :meth:`render` returns False; the
    DOT file is left in place.
    """

    def __init__(
        self,
        engines: Sequence[str] = DEFAULT_ENGINES,
        dpi: int = DEFAULT_DPI,
        timeout: float | None = 600.0,
    ) -> None:
        self.engines = tuple(engines)
        self.dpi = dpi
        self.timeout = timeout

    def command(self, engine: str, dot_path: Path, png_path: Path) -> list[str]:
        return [engine, f"-Gdpi={self.dpi}", "-Tpng", str(dot_path), "-o", str(png_path)]

    def render(self, dot_path: Path, png_path: Path, context: str = "graph") -> bool:
        if not dot_path.exists():
            logger.warning("[%s] DOT file not found: %s", context, dot_path)
            return False

        for engine in self.engines:
            try:
                completed = subprocess.run(
                    self.command(engine, dot_path, png_path),
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self.timeout,
                )
            except FileNotFoundError:
                logger.warning("[%s] Graphviz not found or %s not in PATH", context, engine)
                continue
            except (OSError, subprocess.SubprocessError) as exc:
                logger.error("[%s] Graphviz (%s) failed to run: %s", context, engine, exc)
                continue

            if completed.returncode == 0:
                logger.info("[%s] PNG graph generated using %s: %s", context, engine, png_path)
                return True
            logger.warning(
                "[%s] Graphviz (%s) failed (code %d): %s",
                context,
                engine,
                completed.returncode,
                (completed.stderr or "").strip(),
            )

        logger.warning(
            "[%s] No PNG graph generated. Try converting manually: dot -Tpng %s -o %s",
            context,
            dot_path,
            png_path,
        )
        return False
