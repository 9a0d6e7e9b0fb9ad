"""Edit the log by hand in an external editor."""

import logging
import os
import shlex
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional

from ttrk.core.errors import EditorError
from ttrk.core.fixup import format_log, parse_log
from ttrk.core.models import Log

logger = logging.getLogger(__name__)

FIXUP_HEADER = """\
# Edit the entries of the log below, one entry per line.
#
# Blank lines and lines starting with `#` are ignored.
#
# The duration in parentheses is ignored and recomputed after saving. Leave
# it as it is or empty it, but keep the parentheses.
#
# The current session has `[now]` as its end time and cannot have a message.
# The spacing after `[now]` does not matter.
#
# Completed session:
# 06-24-2022 16:55:46 (UTC-05:00) -> 06-24-2022 16:55:49 (UTC-05:00) (3 seconds): Message here
#
# Current session:
# 06-24-2022 17:21:10 (UTC-05:00) -> [now]                           (35 minutes, 47 seconds)
"""


def resolve_editor(
    config_editor: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Find the editor command to run.

    Args:
        config_editor: Editor from the configuration, used if $EDITOR is unset
        environ: Environment to read $EDITOR from. Defaults to os.environ

    Returns:
        Editor command line

    Raises:
        EditorError: If no editor is configured
    """
    if environ is None:
        environ = os.environ
    editor = environ.get("EDITOR") or config_editor
    if not editor:
        raise EditorError(
            "Failed to get `$EDITOR` environment variable. "
            "Set $EDITOR or the general.editor config option."
        )
    return editor


def run_editor(editor: str, path: Path) -> None:
    """Open ``path`` in ``editor`` and wait until the editor exits.

    Raises:
        EditorError: If the editor cannot be started or exits with an error
    """
    try:
        command = shlex.split(editor) + [str(path)]
    except ValueError as e:
        raise EditorError(f"Invalid editor command `{editor}`: {e}") from e

    logger.info(f"Opening {path} in {editor}")
    try:
        result = subprocess.run(command)
    except OSError as e:
        raise EditorError(f"Failed to open an editor (`{editor}`): {e}") from e

    if result.returncode != 0:
        raise EditorError(f"Editor `{editor}` exited with status {result.returncode}")


def edit_log(log: Log, editor: str, now: datetime) -> Log:
    """Let the user rewrite the log in the fixup format.

    The log is written to a temporary file, the editor is run on it, and
    the edited file is parsed into a new log. The temporary file is removed
    afterwards.

    Args:
        log: Log to edit
        editor: Editor command line
        now: Instant used to render the current session's duration

    Returns:
        The edited log

    Raises:
        EditorError: If the editor cannot be started or fails
        LogParseError: If the edited text is not a valid log
    """
    with tempfile.NamedTemporaryFile(
        "w", suffix=".ttrk", delete=False, encoding="utf-8"
    ) as tmp:
        tmp.write(FIXUP_HEADER)
        tmp.write(format_log(log, now))
        path = Path(tmp.name)

    try:
        run_editor(editor, path)
        text = path.read_text(encoding="utf-8")
    finally:
        path.unlink(missing_ok=True)

    return parse_log(text)
