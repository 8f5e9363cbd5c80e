import re

import pytest

from lokal.extraction.exclusion import (
    FilterOptions,
    is_excluded_attribute,
    should_exclude,
    should_exclude_attribute,
)


@pytest.mark.parametrize("text", ["", "   ", "\n\t", "a", "x "])
def test_excludes_empty_and_short_text(text):
    assert should_exclude(text)


@pytest.mark.parametrize(
    "text",
    ["userName", "user_name", "submit", "item2", "MyComponent", "$ref", "API_KEY"],
)
def test_excludes_identifiers(text):
    assert should_exclude(text)


@pytest.mark.parametrize(
    "text",
    [
        "https://example.com/page",
        "mailto:team@example.com",
        "www.example.com",
        "/usr/local/bin",
        "./components/Button",
        "../assets/logo.svg",
        "C:\\Users\\me",
        ".container",
        "{value}",
        "();",
        "[1, 2]",
    ],
)
def test_excludes_urls_paths_selectors_and_code(text):
    assert should_exclude(text)


@pytest.mark.parametrize(
    "text",
    ["Save", "Hello World", "Welcome back!", "Terms & Conditions", "Don't have an account?", "OK"],
)
def test_keeps_human_text(text):
    assert not should_exclude(text)


def test_min_length_is_configurable():
    options = FilterOptions(min_length=5)
    assert should_exclude("Save", options)
    assert not should_exclude("Saved", options)


def test_custom_patterns():
    options = FilterOptions(exclude_patterns=(re.compile(r"^TODO"),))
    assert should_exclude("TODO fix this label", options)
    assert not should_exclude("Fix this label", options)


def test_filter_is_consistent_across_calls():
    texts = ["Save", "userName", "Hello World", "https://x.io", "  "]
    first = [should_exclude(t) for t in texts]
    for _ in range(5):
        assert [should_exclude(t) for t in texts] == first


@pytest.mark.parametrize(
    "name",
    ["id", "className", "class", "src", "href", "target", "rel", "role",
     "aria-hidden", "data-testid", "viewBox", "d", "strokeWidth"],
)
def test_technical_attributes_are_excluded(name):
    assert is_excluded_attribute(name)
    assert should_exclude_attribute(name, "Some readable text")


@pytest.mark.parametrize("name", ["title", "placeholder", "alt", "label"])
def test_text_attributes_are_not_excluded(name):
    assert not is_excluded_attribute(name)
    assert not should_exclude_attribute(name, "Search products")


@pytest.mark.parametrize("value", ["_blank", "noopener", "noreferrer", "noopener noreferrer"])
def test_boilerplate_attribute_values_are_excluded(value):
    assert should_exclude_attribute("title", value)


def test_attribute_values_go_through_text_filter():
    assert should_exclude_attribute("title", "submitButton")
    assert not should_exclude_attribute("title", "Submit form")
