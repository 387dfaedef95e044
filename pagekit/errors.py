"""Exception types raised while rendering and saving pages."""

from __future__ import annotations


class PageKitError(RuntimeError):
    """Base class for pagekit failures."""


class ContentRenderError(PageKitError):
    """Raised when a content tree cannot be converted to markup."""


class PathError(PageKitError):
    """Raised when a path cannot be normalized or expressed relative to another."""


class MaterializationError(PageKitError):
    """Raised when a dependency cannot be copied into the output directory."""
