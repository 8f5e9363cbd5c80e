"""Error types raised or recorded by the localization pipeline."""


class LokalError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(LokalError):
    """Configuration is missing or unusable."""


class ParseFailure(LokalError):
    """A source file could not be turned into a syntax tree."""

    def __init__(self, file: str, reason: str):
        self.file = file
        self.reason = reason
        super().__init__(f"Failed to parse {file}: {reason}")


class IOFailure(LokalError):
    """A source or catalog file could not be read or written."""

    def __init__(self, file: str, reason: str):
        self.file = file
        self.reason = reason
        super().__init__(f"Failed to process {file}: {reason}")


class SecurityViolation(LokalError):
    """A locale identifier tried to escape the storage directory."""


class CatalogCorruption(LokalError):
    """A persisted locale document is unreadable or has the wrong shape."""


class ProviderFailure(LokalError):
    """A translation provider could not translate a request."""

    def __init__(self, provider: str, reason: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} translation failed: {reason}")
