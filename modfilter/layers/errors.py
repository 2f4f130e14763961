"""
modfilter Layers: Errors.

Every failure of layered module path resolution is fatal for the whole call.
Each cause has its own exception class so callers can tell them apart.
"""

from pathlib import Path
from typing import Optional, Union

from modfilter.core.constants import ErrorCode


class LayeredPathError(Exception):
    """Base class for layered module path failures."""

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        error_code: ErrorCode = ErrorCode.INVALID_INPUT,
    ):
        """Initialize LayeredPathError.

        Args:
            message: Error message
            path: Directory or file the failure concerns
            error_code: Associated error code
        """
        self.message = message
        self.path = path
        self.error_code = error_code
        super().__init__(message if path is None else f"{message}: {path}")


class LayersDirectoryError(LayeredPathError):
    """A layer configuration exists but the layers directory does not."""

    def __init__(self, path: Union[str, Path]):
        super().__init__("Layers directory not found", path, ErrorCode.NOT_FOUND)


class MissingLayerError(LayeredPathError):
    """A configured layer has no directory."""

    def __init__(self, layer: str, path: Union[str, Path]):
        self.layer = layer
        super().__init__(f"Cannot find layer '{layer}'", path, ErrorCode.NOT_FOUND)


class OverlaysDirectoryError(LayeredPathError):
    """An overlays directory exists but cannot be read as a directory."""

    def __init__(self, path: Union[str, Path]):
        super().__init__("Overlays directory is not a readable directory", path, ErrorCode.PERMISSION_DENIED)


class OverlaysMetadataError(LayeredPathError):
    """The overlay registration file cannot be read or names an invalid overlay."""

    def __init__(
        self,
        path: Union[str, Path],
        reason: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.PERMISSION_DENIED,
    ):
        message = "Cannot read overlays metadata"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, path, error_code)


class OverlayRootError(LayeredPathError):
    """A registered overlay is missing or cannot be read."""

    def __init__(self, overlay: str, path: Union[str, Path], missing: bool = True):
        self.overlay = overlay
        if missing:
            super().__init__(f"Overlay '{overlay}' not found", path, ErrorCode.NOT_FOUND)
        else:
            super().__init__(f"Overlay '{overlay}' is not readable", path, ErrorCode.PERMISSION_DENIED)


class LayersConfigError(LayeredPathError):
    """The layer configuration file cannot be read or is invalid."""

    def __init__(self, path: Union[str, Path], reason: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        super().__init__(f"Invalid layer configuration ({reason})", path, error_code)


class AddOnsDirectoryError(LayeredPathError):
    """The add-ons directory exists but cannot be listed."""

    def __init__(self, path: Union[str, Path]):
        super().__init__("Cannot list add-ons directory", path, ErrorCode.PERMISSION_DENIED)
