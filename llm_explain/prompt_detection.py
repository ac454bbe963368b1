"""Regex-based prompt detection for session transcripts.

The default heuristic in transcript.is_prompt_line only looks for " $ " or
" % " and happily matches prose such as 'costs 5 $ each'. RegexPromptDetector
requires a prompt character anchored to a path, user@host or the start of
the line, which cuts down on false positives in command output.

Either predicate can be passed to parse_transcript(is_prompt=...); the
prompt_style setting selects one for the CLI.
"""
import re
from typing import Dict

from .errors import ConfigurationError, ErrorCode
from .transcript import PromptPredicate, is_prompt_line


class RegexPromptDetector:
    """Detect shell prompts (empty or followed by typed input)."""

    PROMPT_PATTERNS = [
        # user@host:~/dir$ / user@host $ (prompt char right after the host part)
        re.compile(r'^\S+@[^\s$#%]+\s*[$#%](?:\s+\S.*|\s*)$'),
        # Dollar prompt after word char, path or bracket: "~/src$ ls"
        re.compile(r'[~\w/\]):][$](?:\s+\S+|\s*$)'),
        # Bare "$ " prompt at line start
        re.compile(r'^[$](?:\s+\S+|\s*$)'),
        # Root prompt needs path context so "cmd # comment" does not match
        re.compile(r'(?:/\w*|[~\])])[#](?:\s+\S+|\s*$)'),
        # Zsh and fancy prompts, not after a digit ("50%")
        re.compile(r'(?<!\d)[%❯➜](?:\s+\S+|\s*$)'),
    ]

    @classmethod
    def is_prompt_line(cls, line: str) -> bool:
        """Check if a single line matches a prompt pattern"""
        if not line.strip():
            return False
        return any(p.search(line) for p in cls.PROMPT_PATTERNS)


PROMPT_STYLES: Dict[str, PromptPredicate] = {
    'simple': is_prompt_line,
    'regex': RegexPromptDetector.is_prompt_line,
}


def get_prompt_predicate(style: str) -> PromptPredicate:
    """Map a prompt_style setting to a prompt predicate.

    Raises:
        ConfigurationError: for an unknown style name
    """
    try:
        return PROMPT_STYLES[style.lower()]
    except KeyError:
        choices = ', '.join(sorted(PROMPT_STYLES))
        raise ConfigurationError(
            f"Unknown prompt style '{style}' (choose from: {choices})",
            code=ErrorCode.CONFIG_INVALID,
        ) from None
