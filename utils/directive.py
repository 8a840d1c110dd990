#!/usr/bin/env python3
"""Parser for the changelog section of a pull request description.

The PR template carries an opt-in checkbox plus a significance list, a type
list, and free-text Message and Comment headings. Only checked boxes count.
"""

from __future__ import annotations

import re
from typing import Optional

from utils.errors import DirectiveParseError
from utils.pr_models import ChangelogDirective


AUTOMATION_MARKER = "Automatically create a changelog entry from the details"

_CHECKED = r"\[[xX]\][ \t]*"

AUTOMATION_RE = re.compile(_CHECKED + re.escape(AUTOMATION_MARKER), re.MULTILINE)
SIGNIFICANCE_RE = re.compile(_CHECKED + r"(Patch|Minor|Major)[ \t]*\r?$", re.MULTILINE)
TYPE_RE = re.compile(
    _CHECKED + r"(Fix|Add|Update|Dev|Tweak|Performance|Enhancement)[ \t]+-",
    re.MULTILINE,
)
MESSAGE_RE = re.compile(r"####[ \t]*Message\b(.*?)(?=####[ \t]*Comment\b|</details>|\Z)", re.DOTALL)
COMMENT_RE = re.compile(r"####[ \t]*Comment\b(.*?)(?=</details>|\Z)", re.DOTALL)
HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


def _clean_section(raw: Optional[str]) -> Optional[str]:
    """Drop template hints (HTML comments) and surrounding whitespace."""
    if raw is None:
        return None
    text = HTML_COMMENT_RE.sub("", raw).strip()
    return text or None


def should_automate_changelog(body: Optional[str]) -> bool:
    """Return True if the automation checkbox is checked in the PR body."""
    if not body:
        return False
    return AUTOMATION_RE.search(body) is not None


def parse_directive(body: Optional[str]) -> ChangelogDirective:
    """Parse the changelog directive from a PR description.

    Rules:
      - No checked automation box: directive with automation_requested=False
      - Exactly one significance and one type box must be checked
      - Message and comment are optional; template hints are ignored

    Raises:
        DirectiveParseError: automation is requested but significance or type is
            missing or checked more than once
    """
    if not should_automate_changelog(body):
        return ChangelogDirective(automation_requested=False)

    significances = SIGNIFICANCE_RE.findall(body)
    if not significances:
        raise DirectiveParseError("No changelog significance found. Check one of Patch, Minor or Major.")
    if len(significances) > 1:
        raise DirectiveParseError("Multiple changelog significances found. Only one can be entered.")

    types = TYPE_RE.findall(body)
    if not types:
        raise DirectiveParseError("No changelog type found. Check one of the change types.")
    if len(types) > 1:
        raise DirectiveParseError("Multiple changelog types found. Only one can be entered.")

    message_match = MESSAGE_RE.search(body)
    comment_match = COMMENT_RE.search(body)

    return ChangelogDirective(
        automation_requested=True,
        significance=significances[0].lower(),
        type=types[0].lower(),
        message=_clean_section(message_match.group(1) if message_match else None),
        comment=_clean_section(comment_match.group(1) if comment_match else None),
    )
