"""Exceptions raised by the translation pipeline."""


class Nl2GherkinError(Exception):
    """Base class for pipeline errors."""


class CatalogLoadError(Nl2GherkinError):
    """A step definition source could not be read.

    ``partial`` holds the catalog built from the files parsed before the
    failure, for callers that choose to continue with it.
    """

    def __init__(self, path, reason: str, partial=None):
        super().__init__(f"Cannot load step definitions from {path}: {reason}")
        self.path = path
        self.reason = reason
        self.partial = partial


class CompletionError(Nl2GherkinError):
    """The text-completion service call failed (network, auth, missing key)."""


class EmptyDescriptionError(Nl2GherkinError, ValueError):
    """No description text was supplied."""
