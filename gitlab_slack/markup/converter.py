"""GitLab markdown to Slack mrkdwn converter.

The conversion is a fixed, ordered list of regex rewrites rather than a
markdown parser. Bold and italic share the ``*`` and ``_`` characters, so
both are first rewritten to vertical-tab placeholders and only then
finalized to Slack markers:

1. Bullets
2. Links (image targets are prefixed with the base URL)
3. Bold -> placeholder
4. Italic -> placeholder
5. Bold placeholder -> ``*``
6. Italic placeholder -> ``_``
7. Headers
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SLACK_BOLD = "*"
SLACK_ITALIC = "_"
BULLET = "•"

_BOLD_PLACEHOLDER = "\vb"
_ITALIC_PLACEHOLDER = "\vi"

# Line boundaries are \n, \r, U+2028 and U+2029, so CRLF text splits into lines
# the same way LF text does.
_LINE_START = r"(?:^|(?<=[\r\u2028\u2029]))"
_LINE_END = r"(?=[\n\r\u2028\u2029]|\Z)"
_IN_LINE = r"[^\n\r\u2028\u2029]"

Replacement = str | Callable[[re.Match[str], str], str]


@dataclass(frozen=True)
class MarkupRule:
    """One rewrite step. Callable replacements also receive the base URL."""

    name: str
    pattern: re.Pattern[str]
    replacement: Replacement

    def apply(self, text: str, base_url: str) -> tuple[str, int]:
        replacement = self.replacement
        if isinstance(replacement, str):
            return self.pattern.subn(replacement, text)
        return self.pattern.subn(lambda m: replacement(m, base_url), text)


def _bullet(match: re.Match[str], base_url: str) -> str:
    # An indented bullet keeps a single tab as its indent.
    return ("\t" if match.group(1) else "") + BULLET


def _link(match: re.Match[str], base_url: str) -> str:
    image, label, target = match.groups()
    if image:
        # Image uploads are relative to the project.
        target = base_url + target
    return f"<{target}|{label}>"


def _header(match: re.Match[str], base_url: str) -> str:
    heading = match.group(1)
    if SLACK_BOLD in heading:
        return heading
    return f"{SLACK_BOLD}{heading}{SLACK_BOLD}"


RULES: tuple[MarkupRule, ...] = (
    MarkupRule("bullet", re.compile(_LINE_START + r"([ \t]+)?\*(?!\*)", re.MULTILINE), _bullet),
    MarkupRule("link", re.compile(r"(!)?\[([^\]]*)]\(([^)]+)\)"), _link),
    MarkupRule(
        "bold",
        re.compile(r"(\*\*|__)(" + _IN_LINE + r"+?)\1"),
        _BOLD_PLACEHOLDER + r"\g<2>" + _BOLD_PLACEHOLDER,
    ),
    MarkupRule(
        "italic",
        re.compile(r"([*_])(" + _IN_LINE + r"+?)\1"),
        _ITALIC_PLACEHOLDER + r"\g<2>" + _ITALIC_PLACEHOLDER,
    ),
    MarkupRule("bold_finalize", re.compile(re.escape(_BOLD_PLACEHOLDER)), SLACK_BOLD),
    MarkupRule("italic_finalize", re.compile(re.escape(_ITALIC_PLACEHOLDER)), SLACK_ITALIC),
    MarkupRule(
        "header",
        re.compile(_LINE_START + r"#+\s*(" + _IN_LINE + r"+)" + _LINE_END, re.MULTILINE),
        _header,
    ),
)


def convert_markdown_to_slack(text: str, base_url: str) -> str:
    """Convert several markdown constructs in ``text`` to Slack formatting.

    Not idempotent: call once per raw value.
    """
    fired: list[str] = []
    for rule in RULES:
        text, count = rule.apply(text, base_url)
        if count:
            fired.append(rule.name)
    if fired:
        logger.debug("Markup rules applied: %s", ", ".join(fired))
    return text
