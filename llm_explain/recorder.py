"""Terminal session recording via script(1).

`start` wraps a fresh shell in `script <log_file>`, so everything typed and
printed lands in the transcript until the user types `exit`. A recording is
active when `script` is among the ancestors of this process: llm-explain
runs as a child of the recorded shell, whose own parent is `script`.
"""

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional, Tuple, Union

from .errors import RecorderError

logger = logging.getLogger(__name__)

RECORDER_COMMAND = 'script'

# Upper bound on how far up the process tree is_recording() looks
MAX_ANCESTORS = 32


def _process_info(pid: int) -> Tuple[int, str]:
    """Return (parent pid, command name) of pid, or (0, '') if unknown."""
    try:
        result = subprocess.run(
            ['ps', '-o', 'ppid=,comm=', '-p', str(pid)],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError) as e:
        logger.debug(f"Could not inspect process {pid}: {e}")
        return 0, ''
    fields = result.stdout.strip().split(None, 1)
    if len(fields) != 2 or not fields[0].isdigit():
        return 0, ''
    return int(fields[0]), fields[1].strip()


def is_recording(pid: Optional[int] = None) -> bool:
    """Check whether this process runs inside a script(1) session.

    Walks from pid (default: our parent) towards init, stopping at the
    first `script` ancestor.
    """
    pid = pid if pid is not None else os.getppid()
    for _ in range(MAX_ANCESTORS):
        if pid <= 1:
            break
        ppid, command = _process_info(pid)
        if os.path.basename(command) == RECORDER_COMMAND:
            logger.debug(f"Found {RECORDER_COMMAND} ancestor at pid {pid}")
            return True
        pid = ppid
    return False


def start(log_file: Union[str, Path]) -> int:
    """Record a new shell session into log_file.

    Blocks until the recorded shell exits.

    Returns:
        Exit code of script(1)

    Raises:
        RecorderError: if a session is already active or script is missing
    """
    if is_recording():
        raise RecorderError(
            'It seems a script session is already active. Please type "exit" '
            'to end the session, and then run this command again.'
        )

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Recording session to {log_file}")

    try:
        completed = subprocess.run([RECORDER_COMMAND, str(log_file)])
    except FileNotFoundError:
        raise RecorderError(
            f"'{RECORDER_COMMAND}' command not found. Is util-linux (or bsdutils) installed?"
        ) from None
    logger.debug(f"script exited with {completed.returncode}")
    return completed.returncode


def stop(log_file: Union[str, Path], cleanup: bool = False) -> bool:
    """Finish a recording, optionally deleting its transcript.

    script(1) itself ends when the user types `exit`; this only handles the
    transcript.

    Returns:
        True if the transcript was deleted

    Raises:
        RecorderError: if no recording is active
    """
    if not is_recording():
        raise RecorderError("It seems a script is not running.")

    log_file = Path(log_file)
    if cleanup and log_file.exists():
        log_file.unlink()
        logger.info(f"Removed session log {log_file}")
        return True
    return False
