"""Exception types raised by the icon pipeline."""


class IconsmithError(RuntimeError):
    """Base class for fatal pipeline errors."""


class SourceImageError(IconsmithError):
    """The source image could not be opened or decoded."""


class ExportError(IconsmithError):
    """Resizing, saving or re-reading an exported PNG failed."""


class ConfigError(IconsmithError):
    """Settings are inconsistent or invalid."""


class IcoEncodeError(IconsmithError):
    """An image could not be packed into the Windows icon container."""


class IcoFormatError(IcoEncodeError):
    """Bytes handed to the ICO reader are not a well-formed container."""


__all__ = [
    "IconsmithError",
    "ConfigError",
    "SourceImageError",
    "ExportError",
    "IcoEncodeError",
    "IcoFormatError",
]
