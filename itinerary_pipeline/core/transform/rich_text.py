"""
Rich text helpers.

The store's rich text fields hold Lexical editor JSON.

Dependencies: None
System role: Plain text <-> rich text conversion
"""

from typing import Any


def text_to_rich_text(text: str | None) -> dict[str, Any] | None:
    """Wrap plain text in a single-paragraph Lexical document."""
    if not text:
        return None
    return {
        "root": {
            "children": [
                {
                    "children": [{"text": text, "type": "text"}],
                    "type": "paragraph",
                    "direction": "ltr",
                    "format": "",
                    "indent": 0,
                    "version": 1,
                }
            ],
            "direction": "ltr",
            "format": "",
            "indent": 0,
            "type": "root",
            "version": 1,
        }
    }


def rich_text_to_plain(value: Any) -> str:
    """Concatenate every text node of a Lexical document, paragraphs separated by spaces."""
    if not value:
        return ""
    if isinstance(value, str):
        return value

    parts: list[str] = []

    def visit(node: Any) -> None:
        if isinstance(node, dict):
            if node.get("type") == "text" and isinstance(node.get("text"), str):
                parts.append(node["text"])
            for child in node.get("children", []) or []:
                visit(child)
            if "root" in node:
                visit(node["root"])

    visit(value)
    return " ".join(part.strip() for part in parts if part.strip())
