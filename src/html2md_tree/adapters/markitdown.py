from __future__ import annotations

import logging
import subprocess
from contextlib import ExitStack
from pathlib import Path
from typing import Sequence

from .base import AdapterResponse, read_html
from ..config import DEFAULT_MARKITDOWN_COMMAND
from ..errors import ConversionError
from ..links import rewrite_links
from ..models import ConversionOptions
from ..utils import atomic_output, temporary_sibling

logger = logging.getLogger(__name__)


class MarkitdownAdapter:
    """Delegates conversion to the ``markitdown`` command-line tool.

    The tool's stdout goes to a temporary file next to the target and is moved into
    place only after a zero exit status, so a failed run leaves no target file.
    """

    name = "markitdown"

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_MARKITDOWN_COMMAND,
        encoding: str = "utf-8",
    ) -> None:
        if not command:
            raise ValueError("markitdown command must not be empty")
        self._command = tuple(command)
        self._encoding = encoding

    def convert_file(
        self, source: Path, target: Path, options: ConversionOptions
    ) -> AdapterResponse:
        with ExitStack() as stack:
            input_path = source
            if options.domain:
                html = rewrite_links(read_html(source, self._encoding), options.domain)
                input_path = stack.enter_context(
                    temporary_sibling(source, html, self._encoding)
                )
            self._run(input_path, target)
        return AdapterResponse(output_path=target)

    def _run(self, input_path: Path, target: Path) -> None:
        args = [*self._command, str(input_path)]
        logger.debug("Running %s", " ".join(args))
        try:
            with atomic_output(target) as handle:
                completed = subprocess.run(
                    args,
                    stdout=handle,
                    stderr=subprocess.PIPE,
                    check=False,
                )
                if completed.returncode != 0:
                    stderr = completed.stderr.decode(self._encoding, errors="replace").strip()
                    raise ConversionError(
                        "TOOL_FAILED",
                        f"{self._command[0]} exited with status {completed.returncode}"
                        + (f": {stderr}" if stderr else ""),
                    )
        except FileNotFoundError as exc:
            raise ConversionError(
                "TOOL_NOT_FOUND", f"{self._command[0]} command not found: {exc}"
            ) from exc
        except OSError as exc:
            raise ConversionError("TOOL_FAILED", f"Cannot run {self._command[0]}: {exc}") from exc
