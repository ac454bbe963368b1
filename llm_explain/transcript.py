"""Extract the last command and its output from a terminal transcript.

A transcript is the text captured by script(1) while the user works in a
shell. The parser walks it backwards: the first prompt it meets is the one
waiting for new input, everything above it up to the previous prompt is the
output, and the line right before that earlier prompt is the command.

Usage:
    from llm_explain.transcript import read_transcript, parse_transcript

    lines = read_transcript(path)
    interaction = parse_transcript(lines)
    interaction.command   # "ls" or None
    interaction.output    # ("file1.txt", "file2.txt")
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .errors import TranscriptNotFoundError

PromptPredicate = Callable[[str], bool]

# Conventional separators between a prompt and the typed input
PROMPT_MARKERS = (" % ", " $ ")

# CSI sequences: ESC [ <parameter bytes> <intermediate bytes> <final letter>
_CSI_RE = re.compile(r'\x1b\[[0-9;?<=>]*[ -/]*[A-Za-z@`~]')
# OSC sequences (window title etc.), terminated by BEL or ST
_OSC_RE = re.compile(r'\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)')
# Two-character escapes such as ESC = / ESC >
_ESC_RE = re.compile(r'\x1b(?:[=>]|[()][0-9A-Za-z])')


def is_prompt_line(line: str) -> bool:
    """Default prompt heuristic: the line contains " % " or " $ "."""
    return any(marker in line for marker in PROMPT_MARKERS)


class ScanState(Enum):
    """States of the backward scan."""

    SEEKING_END_PROMPT = "seeking_end_prompt"      # No prompt seen yet
    SEEKING_START_PROMPT = "seeking_start_prompt"  # Inside the output block
    DONE = "done"


class ScanAction(Enum):
    SKIP = "skip"
    COLLECT = "collect"
    CAPTURE_COMMAND = "capture_command"


# (state, line is a prompt) -> (next state, action)
TRANSITIONS: Dict[Tuple[ScanState, bool], Tuple[ScanState, ScanAction]] = {
    (ScanState.SEEKING_END_PROMPT, False): (ScanState.SEEKING_END_PROMPT, ScanAction.SKIP),
    (ScanState.SEEKING_END_PROMPT, True): (ScanState.SEEKING_START_PROMPT, ScanAction.SKIP),
    (ScanState.SEEKING_START_PROMPT, False): (ScanState.SEEKING_START_PROMPT, ScanAction.COLLECT),
    (ScanState.SEEKING_START_PROMPT, True): (ScanState.DONE, ScanAction.CAPTURE_COMMAND),
}


@dataclass(frozen=True)
class ExtractedInteraction:
    """The most recent command found in a transcript and its output."""

    command: Optional[str] = None
    output: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.command is None and not self.output


def parse_transcript(
    lines: Sequence[str],
    is_prompt: PromptPredicate = is_prompt_line,
) -> ExtractedInteraction:
    """Find the last command and its output by scanning backwards.

    Args:
        lines: Transcript lines, already split with empty lines removed
        is_prompt: Predicate deciding whether a line is a shell prompt

    Returns:
        ExtractedInteraction; command is None when fewer than two prompts
        bound an output block. The command is taken positionally (the line
        before the opening prompt) and is not validated.
    """
    state = ScanState.SEEKING_END_PROMPT
    command = None
    collected: List[str] = []

    for i in range(len(lines) - 1, -1, -1):
        line = lines[i]
        state, action = TRANSITIONS[(state, is_prompt(line))]
        if action is ScanAction.COLLECT:
            collected.append(line)
        elif action is ScanAction.CAPTURE_COMMAND:
            # A prompt on the first line has nothing before it
            if i > 0:
                command = lines[i - 1]
            break

    collected.reverse()
    return ExtractedInteraction(command=command, output=tuple(collected))


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences and carriage returns from raw text."""
    text = _OSC_RE.sub('', text)
    text = _CSI_RE.sub('', text)
    text = _ESC_RE.sub('', text)
    return text.replace('\r', '')


def split_transcript(text: str) -> List[str]:
    """Split transcript text into lines, dropping empty ones."""
    return [line for line in text.split('\n') if line]


def read_transcript(path: Union[str, Path], strip_escapes: bool = True) -> List[str]:
    """Read a session log into parser-ready lines.

    Raises:
        TranscriptNotFoundError: if the file does not exist
    """
    path = Path(path)
    if not path.is_file():
        raise TranscriptNotFoundError(path)
    text = path.read_text(encoding='utf-8', errors='replace')
    if strip_escapes:
        text = strip_ansi(text)
    return split_transcript(text)
