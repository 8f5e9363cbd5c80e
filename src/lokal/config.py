"""Configuration management for the localization pipeline."""

import json
import logging
import os
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = [
    "lokal.config.json",
    "lokal.config.js",
    "lokal.config.cjs",
    "package.json",
]

DEFAULT_EXTENSIONS = [".js", ".jsx", ".ts", ".tsx"]

# Environment variable holding the API key for each provider
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "deepl": "DEEPL_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.5-flash",
    "deepl": "",
}


@dataclass
class AIConfig:
    """Translation provider settings."""

    provider: str = "openai"
    api_key: str = ""
    model: str = ""
    batch_size: Optional[int] = None
    max_concurrency: int = 1

    def __post_init__(self):
        self.provider = self.provider.lower()
        if not self.api_key:
            self.api_key = os.getenv(API_KEY_ENV.get(self.provider, ""), "")
        if not self.model:
            self.model = DEFAULT_MODELS.get(self.provider, "")


@dataclass
class LokalConfig:
    """Project configuration."""

    locales: List[str] = field(default_factory=lambda: ["en"])
    default_locale: str = "en"
    function_name: str = "t"
    component_name: str = "T"
    source_dir: str = "./src"
    output_dir: str = "./locales"

    # Wrapping settings
    key_prefix: str = ""
    exclude_patterns: List[str] = field(default_factory=list)
    min_length: int = 2
    import_source: str = "lokal-react"
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))

    ai: Optional[AIConfig] = None

    # Directory the config was loaded from; relative dirs resolve against it
    root: Path = field(default_factory=Path.cwd)

    @property
    def compiled_exclude_patterns(self) -> List[re.Pattern]:
        return [re.compile(pattern) for pattern in self.exclude_patterns]

    @property
    def source_path(self) -> Path:
        return (self.root / self.source_dir).resolve()

    @property
    def output_path(self) -> Path:
        return (self.root / self.output_dir).resolve()

    @property
    def target_locales(self) -> List[str]:
        """Configured locales other than the default one."""
        return [locale for locale in self.locales if locale != self.default_locale]

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        if not self.locales:
            errors.append("locales must not be empty")
        if self.default_locale not in self.locales:
            errors.append(f"defaultLocale '{self.default_locale}' is not listed in locales")
        if not re.match(r"^[A-Za-z_$][\w$]*$", self.function_name):
            errors.append(f"functionName '{self.function_name}' is not a valid identifier")
        if not re.match(r"^[A-Z][\w$]*$", self.component_name):
            errors.append(f"componentName '{self.component_name}' is not a valid component name")
        if self.min_length < 1:
            errors.append("minLength must be at least 1")
        for pattern in self.exclude_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(f"Invalid exclude pattern {pattern!r}: {e}")
        return errors

    def validate_ai(self) -> List[str]:
        """Validate the translation provider settings."""
        if self.ai is None:
            return ["AI provider not configured. Add an \"ai\" section to lokal.config.json"]
        errors = []
        if self.ai.provider not in API_KEY_ENV:
            errors.append(f"Unknown translation provider: {self.ai.provider}")
        elif not self.ai.api_key:
            errors.append(f"{API_KEY_ENV[self.ai.provider]} is not set")
        return errors


# JSON / JS config keys -> LokalConfig field names
_FIELD_ALIASES = {
    "defaultLocale": "default_locale",
    "functionName": "function_name",
    "componentName": "component_name",
    "sourceDir": "source_dir",
    "outputDir": "output_dir",
    "keyPrefix": "key_prefix",
    "excludePatterns": "exclude_patterns",
    "minLength": "min_length",
    "importSource": "import_source",
}

_AI_ALIASES = {
    "apiKey": "api_key",
    "batchSize": "batch_size",
    "maxConcurrency": "max_concurrency",
}


class ConfigLoader:
    """Finds and loads lokal configuration files."""

    def __init__(self):
        self.config_path: Optional[Path] = None

    def load(self, search_from: Optional[Path] = None) -> LokalConfig:
        """
        Search upward from ``search_from`` for a config file and load it.

        Args:
            search_from: Directory to start from (defaults to the cwd)

        Returns:
            LokalConfig merged over the defaults; defaults if nothing is found
        """
        start = Path(search_from or Path.cwd()).resolve()
        for directory in [start, *start.parents]:
            for name in CONFIG_FILE_NAMES:
                candidate = directory / name
                if not candidate.is_file():
                    continue
                raw = self._read(candidate)
                if raw is None:
                    continue
                self.config_path = candidate
                return self.from_dict(raw, root=directory)

        return LokalConfig(root=start)

    def load_file(self, config_path: Path) -> LokalConfig:
        """
        Load configuration from a specific file.

        Args:
            config_path: Path to a .json / .js / .cjs config or package.json

        Returns:
            LokalConfig merged over the defaults
        """
        path = Path(config_path).resolve()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")

        raw = self._read(path)
        self.config_path = path
        return self.from_dict(raw or {}, root=path.parent)

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        """Read raw config values from a file; None if it holds no lokal config."""
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to read config %s: %s", path, e)
            return None

        if path.name == "package.json":
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse %s: %s", path, e)
                return None
            section = data.get("lokal") if isinstance(data, dict) else None
            return section if isinstance(section, dict) else None

        if path.suffix == ".json":
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in {path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigError(f"Expected an object in {path}")
            return data

        return parse_js_config(content)

    @staticmethod
    def from_dict(raw: Dict[str, Any], root: Optional[Path] = None) -> LokalConfig:
        """Merge raw (camelCase or snake_case) values over the defaults."""
        known = {f.name for f in fields(LokalConfig)}
        values: Dict[str, Any] = {}
        for key, value in raw.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in known and name not in ("ai", "root"):
                values[name] = value

        ai_config = None
        ai_raw = raw.get("ai")
        if isinstance(ai_raw, dict):
            ai_known = {f.name for f in fields(AIConfig)}
            ai_values = {}
            for key, value in ai_raw.items():
                name = _AI_ALIASES.get(key, key)
                if name in ai_known:
                    ai_values[name] = value
            ai_config = AIConfig(**ai_values)

        return LokalConfig(**values, ai=ai_config, root=Path(root or Path.cwd()))


def parse_js_config(content: str) -> Dict[str, Any]:
    """
    Extract literal settings from a ``module.exports = {...}`` config.

    Only plain string and string-array values are understood; anything
    computed at runtime (``process.env.X``) is left to the defaults.
    """
    config: Dict[str, Any] = {}
    content = re.sub(r"^\s*//.*$", "", content, flags=re.M)

    locales_match = re.search(r"locales:\s*\[(.*?)\]", content, re.S)
    if locales_match:
        config["locales"] = [
            item.strip().strip("'\"")
            for item in locales_match.group(1).split(",")
            if item.strip()
        ]

    for key in ("defaultLocale", "functionName", "componentName", "sourceDir",
                "outputDir", "keyPrefix", "importSource"):
        match = re.search(rf"\b{key}:\s*['\"](.*?)['\"]", content)
        if match:
            config[key] = match.group(1)

    ai_match = re.search(r"\bai:\s*\{(.*?)\}", content, re.S)
    if ai_match:
        ai: Dict[str, Any] = {}
        for key in ("provider", "apiKey", "model"):
            match = re.search(rf"\b{key}:\s*['\"](.*?)['\"]", ai_match.group(1))
            if match:
                ai[key] = match.group(1)
        if ai:
            config["ai"] = ai

    return config
