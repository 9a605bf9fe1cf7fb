"""Custom exceptions for bundlescope."""


class BundleScopeError(Exception):
    """Base exception for all bundlescope errors."""


class ConfigError(BundleScopeError):
    """Configuration-related errors."""


class MetafileError(BundleScopeError):
    """The metafile could not be read or is not an esbuild metafile."""


class ValidationError(BundleScopeError):
    """The graph breaks a structural invariant."""

    def __init__(self, message: str, problems: list[str] | None = None):
        self.problems = problems or []
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class ClassificationError(BundleScopeError):
    """No usable entry output could be identified."""
