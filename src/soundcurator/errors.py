"""Exception types raised by the curation pipeline."""


class CuratorError(Exception):
    """Base class for all curation errors."""


class ProviderUnavailable(CuratorError):
    """Raised when a provider is unreachable or returns an empty response."""


class MissingCredential(CuratorError):
    """Raised when a required API key or token is not configured."""


class DownloadFailed(CuratorError):
    """Raised when no audio URL resolves or a transfer produced no file."""


class TranscodeFailed(CuratorError):
    """Raised when the encoder fails or produces no output."""


class UnknownProvider(CuratorError, KeyError):
    """Raised when a provider name is not registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
