"""Rendering engine boundary.

The engine is a black box that turns diagram text into a visual tree. The
default implementation shells out to mermaid-cli (``mmdc``).
"""

import asyncio
import json
import logging
import shutil
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from ..config import RenderConfig, ThemeConfig
from .visual import VisualTree

logger = logging.getLogger(__name__)


class RenderEngineError(Exception):
    """Rendering engine failed to produce output."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class RenderEngine(ABC):
    """Capability interface of an external diagram renderer."""

    @abstractmethod
    async def submit(self, text: str, render_id: str = "mermaid") -> VisualTree:
        """Render diagram text and return the resulting visual tree."""
        pass


class MermaidCliEngine(RenderEngine):
    """Renders Mermaid text to SVG with the mermaid-cli ``mmdc`` executable.

    Theme and spacing are fixed when the engine is created and written to a
    Mermaid config file for every invocation.
    """

    def __init__(self, render: RenderConfig | None = None, theme: ThemeConfig | None = None):
        self.render_config = render or RenderConfig()
        self.theme = theme or ThemeConfig()
        self._mermaid_config = json.dumps(self.theme.to_mermaid_config(), indent=2)

    async def submit(self, text: str, render_id: str = "mermaid") -> VisualTree:
        mmdc = shutil.which(self.render_config.mmdc_path)
        if not mmdc:
            raise RenderEngineError(
                f"mermaid-cli ({self.render_config.mmdc_path}) not found on PATH. "
                "Install Mermaid CLI and retry: npm install -g @mermaid-js/mermaid-cli"
            )

        with tempfile.TemporaryDirectory(prefix="conceptmap-") as td:
            tmp_dir = Path(td)
            input_file = tmp_dir / f"{render_id}.mmd"
            output_file = tmp_dir / f"{render_id}.svg"
            config_file = tmp_dir / "mermaid-config.json"

            input_file.write_text(text, encoding="utf-8")
            config_file.write_text(self._mermaid_config, encoding="utf-8")

            cmd = [
                mmdc,
                "-i", str(input_file),
                "-o", str(output_file),
                "-c", str(config_file),
                "-b", self.render_config.background,
            ]
            if self.render_config.surface_width:
                cmd.extend(["-w", str(self.render_config.surface_width)])
            if self.render_config.surface_height:
                cmd.extend(["-H", str(self.render_config.surface_height)])

            logger.debug(f"Running {' '.join(cmd)}")
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                stdout, stderr = await proc.communicate()
            except asyncio.CancelledError:
                # Timed out or abandoned: reap mmdc before its temp dir goes away
                if proc.returncode is None:
                    logger.warning(f"Killing mmdc (pid {proc.pid}) for cancelled render {render_id}")
                    proc.kill()
                    await proc.wait()
                raise

            if proc.returncode != 0:
                detail = (stderr or stdout or b"").decode("utf-8", errors="replace").strip()
                detail = detail or f"mmdc exited with code {proc.returncode}"
                raise RenderEngineError(f"Mermaid rendering failed: {detail}", proc.returncode, detail)

            if not output_file.exists():
                raise RenderEngineError("Mermaid rendering produced no SVG output", proc.returncode)

            markup = output_file.read_bytes()

        return VisualTree.from_svg(markup)
