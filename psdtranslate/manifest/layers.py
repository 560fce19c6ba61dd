"""Text-layer discovery in Photoshop document manifests.

The result order is the manifest's pre-order layer sequence; translated text
is written back in that same order, so the walk must stay deterministic.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..errors import ManifestFormatError
from ..models.datatypes import TextLayer

TEXT_LAYER_TYPE = "textLayer"
DEFAULT_MAX_DEPTH = 64


def manifest_layers(manifest: Mapping[str, Any]) -> Any:
    """Return the layer list of the first manifest output.

    Raises:
        ManifestFormatError: When the manifest carries no outputs.
    """

    outputs = manifest.get("outputs")
    if not isinstance(outputs, list) or not outputs:
        raise ManifestFormatError("No outputs found in manifest response.")
    first_output = outputs[0]
    if not isinstance(first_output, Mapping):
        raise ManifestFormatError("Manifest output entry is not an object.")
    return first_output.get("layers")


def _layer_content(node: Mapping[str, Any]) -> str:
    text = node.get("text")
    if not isinstance(text, Mapping):
        return ""
    content = text.get("content")
    return content if isinstance(content, str) else ""


def find_text_layers(layers: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> list[TextLayer]:
    """Collect every `textLayer` node in depth-first pre-order.

    Traversal descends into `children` whether or not the node itself was
    emitted. Non-list input yields an empty list. A node reachable through
    more than one parent is visited once.

    Raises:
        ManifestFormatError: When nesting exceeds `max_depth`.
    """

    found: list[TextLayer] = []
    visited: set[int] = set()

    def _walk(nodes: Any, depth: int) -> None:
        if not isinstance(nodes, list):
            return
        if depth > max_depth:
            raise ManifestFormatError(
                f"Manifest layer tree exceeds the maximum depth of {max_depth}."
            )
        for node in nodes:
            if not isinstance(node, Mapping) or id(node) in visited:
                continue
            visited.add(id(node))
            if node.get("type") == TEXT_LAYER_TYPE:
                found.append(
                    TextLayer(
                        name=str(node.get("name") or ""),
                        content=_layer_content(node),
                        position=len(found),
                        node=node,
                    )
                )
            _walk(node.get("children"), depth + 1)

    _walk(layers, 0)
    return found
