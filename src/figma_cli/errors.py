"""Exception types reported by the CLI."""


class FigmaCliError(Exception):
    """Base class for errors reported to the user as a single line."""


class ConfigurationError(FigmaCliError, RuntimeError):
    """Missing or invalid access token."""


class InputError(FigmaCliError, ValueError):
    """Invalid command-line input."""


class NodeNotFoundError(FigmaCliError, LookupError):
    """A requested node or page is absent from the fetched document."""


class FigmaApiError(FigmaCliError, RuntimeError):
    """The Figma API answered with a non-success status."""

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Figma API error ({status}): {body}")
        self.status = status
        self.body = body
