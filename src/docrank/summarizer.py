"""Concise summaries and outlines of markdown content."""

import re

_CODE_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)
_FRONTMATTER_RE = re.compile(r"\A---.*?---\n", re.DOTALL)
_HEADING_LINE_RE = re.compile(r"^#{1,3}\s+(.+)$", re.MULTILINE)
_HEADING_RE = re.compile(r"^(#{1,3})\s+(.+)$")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
_MARKUP_CHARS_RE = re.compile(r"[*_`]")


def summarize_content(content: str, max_length: int = 1500) -> str:
    """Extract a concise summary from markdown content.

    Code blocks are replaced with a placeholder, the first few meaningful
    paragraphs are kept, and a short heading outline is appended when the
    paragraphs leave enough room.

    Args:
        content: Full markdown content
        max_length: Maximum summary length in characters

    Returns:
        Summary text
    """
    summary = _CODE_BLOCK_RE.sub("[code example]", content)
    summary = _FRONTMATTER_RE.sub("", summary)

    paragraphs = [
        p.strip()
        for p in _PARAGRAPH_SPLIT_RE.split(summary)
        if len(p.strip()) > 20 and not p.strip().startswith("#")
    ]

    headings = ["- " + h.strip() for h in _HEADING_LINE_RE.findall(content)[:5]]

    result = ""
    for para in paragraphs[:3]:
        if len(result) + len(para) > max_length:
            break
        result += para + "\n\n"

    if headings and len(result) < max_length * 0.7:
        result += "\n**Content structure:**\n" + "\n".join(headings)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result.strip()


def extract_structure(content: str) -> str:
    """Outline markdown as its headings, each followed by its first meaningful line."""
    structure: list[str] = []
    current_heading = ""
    captured_first_line = False

    for line in content.split("\n"):
        heading = _HEADING_RE.match(line)
        if heading:
            current_heading = heading.group(2)
            structure.append(f"\n**{current_heading}**")
            captured_first_line = False
            continue

        if current_heading and not captured_first_line and len(line.strip()) > 20:
            cleaned = _MARKUP_CHARS_RE.sub("", line).strip()
            if not cleaned.startswith(("<", "[")):
                structure.append(cleaned[:100])
                captured_first_line = True

    return "\n".join(structure)
