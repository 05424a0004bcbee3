"""
ADF Formatter - Atlassian Document Format for Jira.

Converts markdown text to Jira's ADF and back, so descriptions and
comments written in the Scrum game survive a round trip through Jira.
Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import re
from typing import Any, Optional


_HEADING_RE = re.compile(r"^(#{1,6}) (.*)$")
_TASK_RE = re.compile(r"^- \[([ xX])\] (.*)$")
_ORDERED_RE = re.compile(r"^\d+\. (.*)$")
_INLINE_RE = re.compile(r"(\*\*([^*]+)\*\*|\*([^*]+)\*|`([^`]+)`)")


class ADFFormatter:
    """Markdown <-> Atlassian Document Format."""

    @property
    def name(self) -> str:
        return "ADF"

    # -------------------------------------------------------------------------
    # Markdown -> ADF
    # -------------------------------------------------------------------------

    def format_text(self, text: str) -> dict[str, Any]:
        """Convert markdown text to an ADF document."""
        content: list[dict[str, Any]] = []
        current_list: Optional[dict[str, Any]] = None
        current_list_type: Optional[str] = None
        code_lines: Optional[list[str]] = None

        for line in text.split("\n"):
            if code_lines is not None:
                if line.startswith("```"):
                    content.append(self._code_block("\n".join(code_lines)))
                    code_lines = None
                else:
                    code_lines.append(line)
                continue

            if line.startswith("```"):
                current_list = current_list_type = None
                code_lines = []
                continue

            if not line.strip():
                current_list = current_list_type = None
                continue

            heading = _HEADING_RE.match(line)
            task = _TASK_RE.match(line)
            ordered = _ORDERED_RE.match(line)

            if heading:
                current_list = current_list_type = None
                content.append(self._heading(heading.group(2), level=len(heading.group(1))))

            elif task:
                if current_list_type != "task":
                    current_list = {"type": "taskList", "attrs": {"localId": ""}, "content": []}
                    current_list_type = "task"
                    content.append(current_list)
                current_list["content"].append({
                    "type": "taskItem",
                    "attrs": {
                        "localId": "",
                        "state": "DONE" if task.group(1).lower() == "x" else "TODO",
                    },
                    "content": self._parse_inline(task.group(2)),
                })

            elif line.startswith("* ") or line.startswith("- "):
                if current_list_type != "bullet":
                    current_list = {"type": "bulletList", "content": []}
                    current_list_type = "bullet"
                    content.append(current_list)
                current_list["content"].append(self._list_item(line[2:]))

            elif ordered:
                if current_list_type != "ordered":
                    current_list = {"type": "orderedList", "content": []}
                    current_list_type = "ordered"
                    content.append(current_list)
                current_list["content"].append(self._list_item(ordered.group(1)))

            else:
                current_list = current_list_type = None
                content.append({"type": "paragraph", "content": self._parse_inline(line)})

        if code_lines is not None:
            content.append(self._code_block("\n".join(code_lines)))

        return self._doc(content)

    # -------------------------------------------------------------------------
    # ADF -> Markdown
    # -------------------------------------------------------------------------

    def to_text(self, document: Any) -> str:
        """
        Convert an ADF document back to markdown.

        Plain strings (Jira API v2 or server instances) are returned as-is.
        Unknown node types contribute their text content.
        """
        if document is None:
            return ""
        if isinstance(document, str):
            return document

        blocks = [self._block_to_text(node) for node in document.get("content", [])]
        return "\n\n".join(block for block in blocks if block).strip()

    def _block_to_text(self, node: dict[str, Any]) -> str:
        node_type = node.get("type")
        children = node.get("content", [])

        if node_type == "paragraph":
            return self._inline_to_text(children).strip()

        if node_type == "heading":
            level = node.get("attrs", {}).get("level", 1)
            return f"{'#' * level} {self._inline_to_text(children)}"

        if node_type == "bulletList":
            return "\n".join(f"- {self._item_text(item)}" for item in children)

        if node_type == "orderedList":
            return "\n".join(
                f"{index}. {self._item_text(item)}"
                for index, item in enumerate(children, start=1)
            )

        if node_type == "taskList":
            lines = []
            for item in children:
                mark = "x" if item.get("attrs", {}).get("state") == "DONE" else " "
                lines.append(f"- [{mark}] {self._inline_to_text(item.get('content', []))}")
            return "\n".join(lines)

        if node_type == "codeBlock":
            return "```\n" + self._inline_to_text(children) + "\n```"

        if node_type == "text":
            return self._inline_to_text([node])

        return "\n".join(
            text for text in (self._block_to_text(child) for child in children) if text
        )

    def _item_text(self, item: dict[str, Any]) -> str:
        return " ".join(self._block_to_text(child) for child in item.get("content", []))

    def _inline_to_text(self, nodes: list[dict[str, Any]]) -> str:
        parts = []
        for node in nodes:
            node_type = node.get("type")
            if node_type == "text":
                parts.append(self._apply_marks(node.get("text", ""), node.get("marks", [])))
            elif node_type == "hardBreak":
                parts.append("\n")
            elif node_type == "mention":
                parts.append(node.get("attrs", {}).get("text", ""))
            else:
                parts.append(self._inline_to_text(node.get("content", [])))
        return "".join(parts)

    def _apply_marks(self, text: str, marks: list[dict[str, Any]]) -> str:
        for mark in marks:
            mark_type = mark.get("type")
            if mark_type == "strong":
                text = f"**{text}**"
            elif mark_type == "em":
                text = f"*{text}*"
            elif mark_type == "code":
                text = f"`{text}`"
        return text

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _doc(self, content: list) -> dict[str, Any]:
        """Create ADF document wrapper."""
        if not content:
            content = [{"type": "paragraph", "content": []}]

        return {"type": "doc", "version": 1, "content": content}

    def _heading(self, text: str, level: int = 2) -> dict[str, Any]:
        return {
            "type": "heading",
            "attrs": {"level": level},
            "content": self._parse_inline(text),
        }

    def _list_item(self, text: str) -> dict[str, Any]:
        return {
            "type": "listItem",
            "content": [{"type": "paragraph", "content": self._parse_inline(text)}],
        }

    def _code_block(self, text: str) -> dict[str, Any]:
        return {"type": "codeBlock", "content": [self._text(text)] if text else []}

    def _text(self, text: str, mark: Optional[str] = None) -> dict[str, Any]:
        node: dict[str, Any] = {"type": "text", "text": text}
        if mark:
            node["marks"] = [{"type": mark}]
        return node

    def _parse_inline(self, text: str) -> list[dict[str, Any]]:
        """Parse inline formatting: **bold**, *italic*, `code`."""
        content = []
        last_end = 0

        for match in _INLINE_RE.finditer(text):
            if match.start() > last_end:
                content.append(self._text(text[last_end:match.start()]))

            full = match.group(0)
            if full.startswith("**"):
                content.append(self._text(match.group(2), "strong"))
            elif full.startswith("`"):
                content.append(self._text(match.group(4), "code"))
            else:
                content.append(self._text(match.group(3), "em"))

            last_end = match.end()

        if last_end < len(text):
            content.append(self._text(text[last_end:]))

        return content
