"""Unit tests for the PR description changelog directive parser."""

import pytest

from utils.directive import parse_directive, should_automate_changelog
from utils.errors import DirectiveParseError


def pr_body(
    automate="x",
    significance="Patch",
    change_type="Fix",
    message="Fix the cart totals rounding.",
    comment="",
    newline="\n",
):
    sig_lines = [f"- [{'x' if s == significance else ' '}] {s}" for s in ("Patch", "Minor", "Major")]
    type_lines = [
        f"- [{'x' if t == change_type else ' '}] {t} - {desc}"
        for t, desc in (
            ("Fix", "Fixes an existing bug"),
            ("Add", "Adds functionality"),
            ("Update", "Update existing functionality"),
            ("Dev", "Development related task"),
            ("Tweak", "A minor adjustment to the codebase"),
            ("Performance", "Address performance issues"),
            ("Enhancement", "Improvement to existing functionality"),
        )
    ]
    lines = [
        "### Changes proposed in this Pull Request:",
        "",
        "Rounds totals correctly.",
        "",
        "<details>",
        "<summary>Changelog Entry Details</summary>",
        "",
        "#### Significance",
        "<!-- Choose only one -->",
        *sig_lines,
        "",
        "#### Type",
        "<!-- Choose only one -->",
        *type_lines,
        "",
        "#### Message <!-- Add a changelog message here -->",
        message,
        "",
        "#### Comment <!-- If the changes in this pull request don't warrant a changelog entry, you can alternatively supply a comment here. -->",
        comment,
        "",
        "</details>",
        "",
        f"- [{automate}] Automatically create a changelog entry from the details below.",
    ]
    return newline.join(lines)


class TestShouldAutomateChangelog:

    def test_checked_marker(self):
        assert should_automate_changelog(pr_body()) is True

    def test_uppercase_x_counts_as_checked(self):
        assert should_automate_changelog(pr_body(automate="X")) is True

    def test_unchecked_marker(self):
        assert should_automate_changelog(pr_body(automate=" ")) is False

    @pytest.mark.parametrize("body", [None, "", "Just a description without the template."])
    def test_missing_marker(self, body):
        assert should_automate_changelog(body) is False


class TestParseDirective:

    def test_not_requested_is_not_an_error(self):
        directive = parse_directive(pr_body(automate=" ", significance="none"))

        assert directive.automation_requested is False
        assert directive.significance is None
        assert directive.type is None

    def test_full_directive(self):
        directive = parse_directive(pr_body())

        assert directive.automation_requested is True
        assert directive.significance == "patch"
        assert directive.type == "fix"
        assert directive.message == "Fix the cart totals rounding."
        assert directive.comment is None

    def test_other_choices_are_lowercased(self):
        directive = parse_directive(pr_body(significance="Major", change_type="Enhancement"))

        assert directive.significance == "major"
        assert directive.type == "enhancement"

    def test_comment_without_message(self):
        directive = parse_directive(pr_body(message="", comment="Only touches unit tests."))

        assert directive.message is None
        assert directive.comment == "Only touches unit tests."

    def test_template_hints_are_not_part_of_message(self):
        directive = parse_directive(pr_body(message=""))

        assert directive.message is None

    def test_crlf_line_endings(self):
        directive = parse_directive(pr_body(newline="\r\n", significance="Minor", change_type="Add"))

        assert directive.significance == "minor"
        assert directive.type == "add"
        assert directive.message == "Fix the cart totals rounding."

    def test_multiline_message_is_preserved(self):
        directive = parse_directive(pr_body(message="First line.\nSecond line."))

        assert directive.message == "First line.\nSecond line."

    def test_missing_significance_raises(self):
        with pytest.raises(DirectiveParseError) as exc_info:
            parse_directive(pr_body(significance="none"))

        assert "significance" in str(exc_info.value)
        assert exc_info.value.code == "DIRECTIVE"

    def test_missing_type_raises(self):
        with pytest.raises(DirectiveParseError) as exc_info:
            parse_directive(pr_body(change_type="none"))

        assert "type" in str(exc_info.value)

    def test_multiple_significances_raise(self):
        body = pr_body(significance="Patch").replace("- [ ] Major", "- [x] Major")

        with pytest.raises(DirectiveParseError) as exc_info:
            parse_directive(body)

        assert "Multiple changelog significances" in str(exc_info.value)

    def test_multiple_types_raise(self):
        body = pr_body(change_type="Fix").replace("- [ ] Add -", "- [X] Add -")

        with pytest.raises(DirectiveParseError) as exc_info:
            parse_directive(body)

        assert "Multiple changelog types" in str(exc_info.value)

    def test_shell_metacharacters_are_kept_verbatim(self):
        directive = parse_directive(pr_body(message='Fix "quotes" and $(rm -rf /) handling'))

        assert directive.message == 'Fix "quotes" and $(rm -rf /) handling'
