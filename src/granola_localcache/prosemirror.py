"""Plain-text rendering of Granola's ProseMirror notes.

Granola stores notes as a nested tree of typed nodes (``doc``,
``paragraph``, ``bulletList``, ``text`` ...).  Notes are cosmetic, so a
tree that cannot be parsed renders as an empty string instead of raising.
"""

import json
import logging
from typing import Annotated, Any

from pydantic import BaseModel, ValidationError

from .types import NullableStr, null_as

logger = logging.getLogger(__name__)


class ProseMirrorNode(BaseModel):
    type: NullableStr = ""
    text: NullableStr = ""
    content: Annotated[list["ProseMirrorNode"], null_as(list)] = []
    attrs: Any = None


def _render(node: ProseMirrorNode, parts: list[str], depth: int) -> None:
    if node.type == "text":
        parts.append(node.text)
    elif node.type == "hardBreak":
        parts.append("\n")
    elif node.type in ("paragraph", "heading"):
        _render_children(node, parts, depth)
        parts.append("\n")
    elif node.type in ("bulletList", "orderedList"):
        # Ordered lists render with "-" bullets too.
        _render_children(node, parts, depth + 1)
    elif node.type == "listItem":
        parts.append("  " * max(depth - 1, 0))
        parts.append("- ")
        _render_children(node, parts, depth)
    else:
        _render_children(node, parts, depth)


def _render_children(node: ProseMirrorNode, parts: list[str], depth: int) -> None:
    for child in node.content:
        _render(child, parts, depth)


def prosemirror_to_plain_text(raw: Any) -> str:
    """Flatten a ProseMirror document into plain text.

    Args:
        raw: The decoded node tree (a dict), or its JSON text.

    Returns:
        Whitespace-trimmed text; ``""`` for empty or malformed input.
    """
    if not raw:
        return ""

    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return ""

    try:
        doc = ProseMirrorNode.model_validate(raw)
        parts: list[str] = []
        _render(doc, parts, 0)
    except (ValidationError, RecursionError) as e:
        logger.debug("Unparseable notes tree: %s", e)
        return ""

    return "".join(parts).strip()
