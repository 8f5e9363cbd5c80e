"""Decides which literals are human-readable text worth translating."""

import re
from dataclasses import dataclass, field
from typing import Pattern, Tuple

# Code-like identifiers: camelCase, snake_case, lowercase words, names with
# digits, underscores or `$`, PascalCase with an inner capital.
# Capitalized single words ("Save", "Hello") are treated as text.
IDENTIFIER_PATTERN = re.compile(
    r"^(?:"
    r"[a-z_$][\w$]*"
    r"|[A-Za-z_$][\w$]*[\d_$][\w$]*"
    r"|[A-Z][a-z0-9]+[A-Z][\w$]*"
    r")$"
)
URL_PATTERN = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*://|mailto:|tel:|www\.)")
PATH_PATTERN = re.compile(r"^(?:[/\\]|\.{1,2}[/\\]|~[/\\]|[a-zA-Z]:\\)")
CSS_CLASS_PATTERN = re.compile(r"^\.[a-zA-Z][\w-]*$")
CODE_PUNCTUATION_PATTERN = re.compile(r"^[{}\[\]();]")

# Attribute names whose values are never user-facing text
EXCLUDED_ATTRIBUTES = frozenset({
    "id", "class", "className", "src", "srcSet", "href", "target", "rel", "role",
    "key", "ref", "style", "type", "name", "htmlFor", "for", "xmlns", "lang",
    "method", "action", "encType", "autoComplete", "inputMode", "testID",
    # SVG geometry and paint
    "d", "viewBox", "x", "y", "cx", "cy", "r", "rx", "ry", "x1", "y1", "x2", "y2",
    "dx", "dy", "width", "height", "points", "transform", "fill", "stroke",
    "strokeWidth", "strokeLinecap", "strokeLinejoin", "fillRule", "clipRule",
    "clipPath", "preserveAspectRatio", "offset", "gradientTransform",
})
EXCLUDED_ATTRIBUTE_PREFIXES = ("aria-", "data-", "xlink:", "xml:")

# Attribute values that are boilerplate, whatever the attribute
EXCLUDED_ATTRIBUTE_VALUES = frozenset({
    "_blank", "_self", "_parent", "_top",
    "noopener", "noreferrer", "noopener noreferrer", "noreferrer noopener",
    "nofollow", "nofollow noopener", "external",
})


@dataclass(frozen=True)
class FilterOptions:
    """Caller-supplied knobs for the exclusion filter."""

    min_length: int = 2
    exclude_patterns: Tuple[Pattern, ...] = field(default_factory=tuple)

    @classmethod
    def from_config(cls, config) -> "FilterOptions":
        """Build options from a LokalConfig."""
        return cls(
            min_length=config.min_length,
            exclude_patterns=tuple(config.compiled_exclude_patterns),
        )


DEFAULT_OPTIONS = FilterOptions()


def should_exclude(text: str, options: FilterOptions = DEFAULT_OPTIONS) -> bool:
    """
    Check whether a literal should never be treated as translatable.

    Args:
        text: The literal text (untrimmed)
        options: Minimum length and custom exclusion patterns

    Returns:
        True if the text must be left alone
    """
    if not text or not text.strip():
        return True

    stripped = text.strip()

    if len(stripped) < options.min_length:
        return True

    if IDENTIFIER_PATTERN.match(stripped):
        return True
    if URL_PATTERN.match(stripped):
        return True
    if PATH_PATTERN.match(stripped):
        return True
    if CSS_CLASS_PATTERN.match(stripped):
        return True
    if CODE_PUNCTUATION_PATTERN.match(stripped):
        return True

    for pattern in options.exclude_patterns:
        if pattern.search(text):
            return True

    return False


def is_excluded_attribute(name: str) -> bool:
    """Check whether an attribute name is technical (never translated)."""
    if name in EXCLUDED_ATTRIBUTES:
        return True
    return name.startswith(EXCLUDED_ATTRIBUTE_PREFIXES)


def should_exclude_attribute(
    name: str, value: str, options: FilterOptions = DEFAULT_OPTIONS
) -> bool:
    """Check whether an attribute's string value should be left alone."""
    if is_excluded_attribute(name):
        return True
    if value.strip() in EXCLUDED_ATTRIBUTE_VALUES:
        return True
    return should_exclude(value, options)
