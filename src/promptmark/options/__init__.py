"""Configuration options for promptmark render passes."""

from promptmark.options.base import CloneFrozenMixin, RenderOptions

__all__ = ["CloneFrozenMixin", "RenderOptions"]
