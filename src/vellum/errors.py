"""Exception types raised while rendering an archive."""


class VellumError(Exception):
    """Base class for rendering failures."""


class TemplateLoadError(VellumError):
    """A required template is missing or does not compile."""


class RecordDecodeError(VellumError, ValueError):
    """A raw export record lacks required fields or has the wrong shape."""


class ChunkFormatError(VellumError):
    """A chunk filename or message id breaks the export format."""


class RenderError(VellumError):
    """A template failed to render a page."""


class PageWriteError(VellumError):
    """An output page could not be written."""
