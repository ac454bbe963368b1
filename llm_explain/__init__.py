"""
llm-explain - Explain terminal errors with an LLM.

Records a shell session with script(1), finds the last command and its
output in the transcript, and asks a chat model to explain it.

CLI Usage:
    llm-explain setup        # Store API key and engine
    llm-explain start        # Record a session
    llm-explain explain      # Explain the last command
    llm-explain prompt TEXT  # Ask any question

Library Usage:
    from llm_explain import parse_transcript, read_transcript

    interaction = parse_transcript(read_transcript(path))
    interaction.command, interaction.output
"""

from .transcript import (
    ExtractedInteraction,
    ScanState,
    is_prompt_line,
    parse_transcript,
    read_transcript,
    split_transcript,
    strip_ansi,
)

__all__ = [
    'ExtractedInteraction',
    'ScanState',
    'is_prompt_line',
    'parse_transcript',
    'read_transcript',
    'split_transcript',
    'strip_ansi',
]

__version__ = "0.1.0"
