"""Validator for interpolation placeholders in UI strings."""

import re
from collections import Counter
from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class PlaceholderIssue:
    """Represents a placeholder validation issue."""

    error_type: str  # missing, extra, count_mismatch, order_changed
    message: str
    severity: str  # critical, warning


class PlaceholderValidator:
    """
    Validates that interpolation placeholders survive translation.

    Recognized placeholders:
    - {{name}} - double-brace interpolation (i18next style)
    - {name}, {0} - single-brace interpolation (ICU / format style)
    - %s, %d, %1$s - printf style
    """

    PLACEHOLDER_PATTERN = re.compile(
        r"\{\{\s*[\w.\-]+\s*\}\}"  # {{name}}
        r"|\{\s*[\w.\-]+\s*\}"  # {name}
        r"|%(?:\d+\$)?[sdif@]"  # %s, %1$s
    )

    def validate(self, source: str, translation: str) -> Tuple[bool, List[PlaceholderIssue]]:
        """
        Validate that placeholders in source match those in translation.

        Args:
            source: Original source text
            translation: Translated text

        Returns:
            Tuple of (is_valid, list of issues)
        """
        issues = []

        source_placeholders = self.extract_placeholders(source)
        trans_placeholders = self.extract_placeholders(translation)

        if len(source_placeholders) != len(trans_placeholders):
            issues.append(
                PlaceholderIssue(
                    error_type="count_mismatch",
                    message=f"Placeholder count mismatch: source has {len(source_placeholders)}, "
                    f"translation has {len(trans_placeholders)}",
                    severity="critical",
                )
            )

        source_counts = Counter(source_placeholders)
        trans_counts = Counter(trans_placeholders)

        for placeholder in sorted(source_counts - trans_counts):
            issues.append(
                PlaceholderIssue(
                    error_type="missing",
                    message=f"Missing placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        for placeholder in sorted(trans_counts - source_counts):
            issues.append(
                PlaceholderIssue(
                    error_type="extra",
                    message=f"Extra placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        # Named placeholders may move freely; bare printf ones may not
        if not issues:
            source_positional = [p for p in source_placeholders if p.startswith("%") and "$" not in p]
            trans_positional = [p for p in trans_placeholders if p.startswith("%") and "$" not in p]
            if source_positional != trans_positional:
                issues.append(
                    PlaceholderIssue(
                        error_type="order_changed",
                        message="printf placeholder order changed (may cause runtime issues)",
                        severity="warning",
                    )
                )

        is_valid = not any(issue.severity == "critical" for issue in issues)
        return is_valid, issues

    def extract_placeholders(self, text: str) -> List[str]:
        """Extract all placeholders from text, whitespace inside braces removed."""
        return [re.sub(r"\s+", "", match) for match in self.PLACEHOLDER_PATTERN.findall(text)]

    def describe(self, issues: List[PlaceholderIssue]) -> str:
        """Join critical issue messages into one line."""
        return "; ".join(issue.message for issue in issues if issue.severity == "critical")
