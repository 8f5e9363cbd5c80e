import json
from pathlib import Path

import pytest

from lokal.config import AIConfig, ConfigLoader, LokalConfig, parse_js_config
from lokal.errors import ConfigError


def test_defaults():
    config = LokalConfig()

    assert config.locales == ["en"]
    assert config.default_locale == "en"
    assert config.function_name == "t"
    assert config.component_name == "T"
    assert config.source_dir == "./src"
    assert config.output_dir == "./locales"
    assert config.extensions == [".js", ".jsx", ".ts", ".tsx"]
    assert config.ai is None
    assert config.validate() == []


def test_load_walks_up_to_config_file(tmp_path):
    (tmp_path / "lokal.config.json").write_text(
        json.dumps({"locales": ["en", "fr"], "functionName": "translate", "unknown": 1}),
        encoding="utf-8",
    )
    nested = tmp_path / "src" / "components"
    nested.mkdir(parents=True)

    loader = ConfigLoader()
    config = loader.load(nested)

    assert loader.config_path == (tmp_path / "lokal.config.json").resolve()
    assert config.locales == ["en", "fr"]
    assert config.function_name == "translate"
    assert config.component_name == "T"
    assert config.root == tmp_path.resolve()
    assert config.output_path == (tmp_path / "locales").resolve()
    assert config.target_locales == ["fr"]


def test_package_json_section(tmp_path):
    (tmp_path / "package.json").write_text(
        json.dumps({"name": "app", "lokal": {"locales": ["en", "de"], "outputDir": "i18n"}}),
        encoding="utf-8",
    )
    config = ConfigLoader().load(tmp_path)

    assert config.locales == ["en", "de"]
    assert config.output_path == (tmp_path / "i18n").resolve()


def test_package_json_without_section_is_skipped(tmp_path):
    (tmp_path / "lokal.config.json").write_text(json.dumps({"locales": ["en", "it"]}), encoding="utf-8")
    app = tmp_path / "app"
    app.mkdir()
    (app / "package.json").write_text(json.dumps({"name": "app"}), encoding="utf-8")

    assert ConfigLoader().load(app).locales == ["en", "it"]


def test_js_config(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    (tmp_path / "lokal.config.js").write_text(
        "// project settings\n"
        "module.exports = {\n"
        "  locales: ['en', 'de'],\n"
        "  defaultLocale: 'en',\n"
        "  functionName: \"translate\",\n"
        "  outputDir: './i18n',\n"
        "  ai: { provider: 'gemini', model: 'gemini-pro', apiKey: process.env.GEMINI_API_KEY },\n"
        "};\n",
        encoding="utf-8",
    )
    config = ConfigLoader().load_file(tmp_path / "lokal.config.js")

    assert config.locales == ["en", "de"]
    assert config.function_name == "translate"
    assert config.output_dir == "./i18n"
    assert config.ai.provider == "gemini"
    assert config.ai.model == "gemini-pro"
    assert config.ai.api_key == "g-key"


def test_parse_js_config_ignores_commented_lines():
    raw = parse_js_config("module.exports = {\n  // locales: ['xx'],\n  locales: ['en'],\n};\n")
    assert raw == {"locales": ["en"]}


def test_load_file_errors(tmp_path):
    with pytest.raises(ConfigError):
        ConfigLoader().load_file(tmp_path / "missing.json")

    broken = tmp_path / "lokal.config.json"
    broken.write_text("{nope", encoding="utf-8")
    with pytest.raises(ConfigError):
        ConfigLoader().load_file(broken)


def test_validate_reports_problems():
    config = LokalConfig(
        locales=["es"],
        default_locale="en",
        function_name="not valid",
        component_name="trans",
        min_length=0,
        exclude_patterns=["("],
    )
    errors = config.validate()

    assert len(errors) == 5
    assert any("defaultLocale" in e for e in errors)
    assert any("functionName" in e for e in errors)


def test_ai_config_reads_key_from_environment(monkeypatch):
    monkeypatch.setenv("DEEPL_API_KEY", "d-key")
    ai = AIConfig(provider="DeepL")

    assert ai.provider == "deepl"
    assert ai.api_key == "d-key"


def test_ai_config_default_model(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    ai = AIConfig()
    assert ai.model == "gpt-4o-mini"
    assert ai.api_key == ""


def test_validate_ai(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert LokalConfig().validate_ai()
    assert LokalConfig(ai=AIConfig(provider="watson", api_key="x")).validate_ai()
    assert LokalConfig(ai=AIConfig()).validate_ai() == ["OPENAI_API_KEY is not set"]
    assert LokalConfig(ai=AIConfig(api_key="sk-test")).validate_ai() == []


def test_from_dict_accepts_snake_case():
    config = ConfigLoader.from_dict(
        {"default_locale": "de", "locales": ["de", "en"], "ai": {"batchSize": 10}},
        root=Path("/tmp"),
    )
    assert config.default_locale == "de"
    assert config.ai.batch_size == 10
