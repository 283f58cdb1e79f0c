"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class WeatherProviderError(Exception):
    """Raised inside a provider when a fetch or payload validation fails."""

    def __init__(
        self,
        message: str,
        *,
        kind: str = "transport",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


class CacheError(Exception):
    """Raised when writing the weather cache file fails."""
