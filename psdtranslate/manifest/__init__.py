"""Document manifest helpers."""

from .layers import find_text_layers, manifest_layers

__all__ = ["find_text_layers", "manifest_layers"]
