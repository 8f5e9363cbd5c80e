import logging

from lokal.cancellation import CancellationToken
from lokal.extraction.scanner import Scanner


def values(result):
    return [s.value for s in result.strings]


def test_call_form_is_extracted_with_location():
    result = Scanner().parse_content('const a = t("Hello world");\n', "src/App.tsx")

    assert values(result) == ["Hello world"]
    extracted = result.strings[0]
    assert extracted.key == "Hello world"
    assert extracted.file == "src/App.tsx"
    assert extracted.line == 1
    assert extracted.column == 12
    assert result.errors == []


def test_call_form_resolves_escapes():
    result = Scanner().parse_content("t('It\\'s here');\n", "a.js")
    assert values(result) == ["It's here"]


def test_non_literal_arguments_are_ignored():
    source = (
        "t(label);\n"
        "t(`Hello ${name}`);\n"
        "t('a' + b);\n"
        "t();\n"
    )
    assert values(Scanner().parse_content(source, "a.ts")) == []


def test_other_callees_are_ignored():
    source = "i18n('Hello');\nobj.t('Nested');\ntranslate('Other');\n"
    assert values(Scanner().parse_content(source, "a.js")) == []


def test_element_form_with_literal_text():
    source = (
        "export function Greeting() {\n"
        "  return <T>Welcome back</T>;\n"
        "}\n"
    )
    result = Scanner().parse_content(source, "Greeting.tsx")

    assert values(result) == ["Welcome back"]
    assert result.strings[0].line == 2


def test_element_form_requires_plain_text_child():
    source = (
        "const a = <T>{name}</T>;\n"
        "const b = <T>Hello <b>there</b></T>;\n"
        "const c = <p>Not marked</p>;\n"
    )
    assert values(Scanner().parse_content(source, "a.tsx")) == []


def test_custom_function_and_component_names():
    source = (
        "const a = translate('From call');\n"
        "const b = <Trans>From element</Trans>;\n"
        "const c = t('Ignored');\n"
    )
    scanner = Scanner(function_name="translate", component_name="Trans")
    assert values(scanner.parse_content(source, "a.jsx")) == ["From call", "From element"]


def test_syntax_error_does_not_abort_the_file():
    source = (
        "const before = t('Before error');\n"
        "const broken = {{{ ;\n"
    )
    result = Scanner().parse_content(source, "broken.tsx")
    assert "Before error" in values(result)


def test_calls_around_a_syntax_error_are_all_extracted():
    source = (
        "const before = t('Before error');\n"
        "const broken = (;\n"
        "const after = t('After error');\n"
    )
    result = Scanner().parse_content(source, "broken.tsx")
    assert values(result) == ["Before error", "After error"]
    assert result.errors == []


def test_calls_in_damaged_regions_are_kept_with_a_warning(monkeypatch, caplog):
    monkeypatch.setattr("lokal.extraction.scanner.in_error_region", lambda node: True)

    with caplog.at_level(logging.WARNING, logger="lokal.extraction.scanner"):
        result = Scanner().parse_content("t('Inside broken');\n", "broken.tsx")

    assert values(result) == ["Inside broken"]
    assert "damaged region of broken.tsx" in caplog.text


def test_plain_typescript_casts_parse():
    source = "const n = <number>value;\nconst s = t('Typed');\n"
    assert values(Scanner().parse_content(source, "util.ts")) == ["Typed"]


def test_scan_directory_skips_hidden_dependencies_and_excluded(tmp_path, write_file):
    src = tmp_path / "src"
    write_file(src / "App.tsx", "const a = t('In app');\n")
    write_file(src / "pages" / "Home.jsx", "const b = t('In page');\n")
    write_file(src / "node_modules" / "lib" / "index.js", "t('Dependency');\n")
    write_file(src / ".cache" / "c.tsx", "t('Hidden');\n")
    write_file(src / "locales" / "gen.ts", "t('Generated');\n")
    write_file(src / "README.md", "t('Markdown');\n")

    result = Scanner().scan_directory(src, exclude_dirs=[src / "locales"])

    assert sorted(values(result)) == ["In app", "In page"]
    assert result.files_scanned == 2
    assert result.errors == []


def test_scan_directory_isolates_unreadable_files(tmp_path, write_file):
    src = tmp_path / "src"
    write_file(src / "a.tsx", "t('Good file');\n")
    (src / "b.tsx").write_bytes(b"\xff\xfe\xfa t('bad')")

    result = Scanner().scan_directory(src)

    assert values(result) == ["Good file"]
    assert len(result.errors) == 1
    assert "b.tsx" in result.errors[0]
    assert result.files_scanned == 2


def test_scan_directory_stops_when_cancelled(tmp_path, write_file):
    write_file(tmp_path / "a.tsx", "t('Never read');\n")
    token = CancellationToken()
    token.cancel()

    result = Scanner().scan_directory(tmp_path, cancel=token)

    assert result.cancelled
    assert result.files_scanned == 0
    assert result.strings == []


def test_unreadable_file_is_reported_as_io_failure(tmp_path):
    path = tmp_path / "bad.tsx"
    path.write_bytes(b"\xff\xfe\xfa")

    result = Scanner().parse_file(path)

    assert result.strings == []
    assert result.errors[0].startswith(f"Failed to process {path}: ")
