"""Errors raised while rendering a tone."""


class RenderError(Exception):
    """A render failed.

    ``stage`` names where it failed: "config", "path", "encode" or "write".
    """

    stage = "render"

    def __init__(self, message: str, stage: str | None = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class ConfigInvalid(RenderError, ValueError):
    """Render settings or progression break an invariant. Raised before any I/O."""

    stage = "config"


class OutputPathUnwritable(RenderError):
    """The destination cannot be created or overwritten."""

    stage = "path"


class EncodingFailure(RenderError):
    """The WAV writer rejected the format or a write failed mid-stream."""

    stage = "encode"
