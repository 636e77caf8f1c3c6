"""
Markdown parser - turns markdown files with YAML front matter into records.
"""

import re
from typing import Any

import yaml

from .base import BaseParser
from .document import DocumentRecord, normalize_path
from .exceptions import ParseError
from .utils.logging import get_logger

logger = get_logger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)

_FENCE_RE = re.compile(r"^\s*(```|~~~).*$", re.MULTILINE)
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_RE = re.compile(r"</?[A-Za-z][^<>]*?/?>")
_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")
_REF_LINK_RE = re.compile(r"\[([^\]]*)\]\[[^\]]*\]")
_LINK_DEF_RE = re.compile(r"^\s*\[[^\]]+\]:\s*\S+.*$", re.MULTILINE)
_HEADING_RE = re.compile(r"^\s{0,3}#{1,6}\s*", re.MULTILINE)
_HEADING_ID_RE = re.compile(r"\s*\{/\*.*?\*/\}")
_BLOCKQUOTE_RE = re.compile(r"^\s*>\s?", re.MULTILINE)
_LIST_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+", re.MULTILINE)
_RULE_RE = re.compile(r"^\s*(?:[-*_]\s*){3,}$", re.MULTILINE)
_EMPHASIS_RE = re.compile(r"(\*{1,3})(\S.*?\S|\S)\1")
_UNDERSCORE_EMPHASIS_RE = re.compile(r"(?<!\w)(_{1,3})(\S.*?\S|\S)\1(?!\w)")
_STRIKE_RE = re.compile(r"~~(.+?)~~")
_INLINE_CODE_RE = re.compile(r"`+([^`]*)`+")
_TABLE_PIPE_RE = re.compile(r"\s*\|\s*")
_TABLE_RULE_RE = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(?:\|\s*:?-{3,}:?\s*)*\|?\s*$", re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")


def split_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """
    Split YAML front matter from a markdown document.

    Args:
        content: Raw file content

    Returns:
        Tuple of (frontmatter dict, body content)
    """
    match = _FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    body = content[match.end():]

    try:
        frontmatter = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse frontmatter: {e}")
        return {}, body

    if not isinstance(frontmatter, dict):
        logger.warning("Ignoring frontmatter that is not a mapping")
        return {}, body

    return frontmatter, body


def markdown_to_plain_text(markdown: str) -> str:
    """
    Strip markdown formatting to plain text for search indexing.

    Code block contents are kept, fence lines are dropped.
    """
    text = _FENCE_RE.sub("", markdown)
    text = _HTML_COMMENT_RE.sub(" ", text)
    text = _HEADING_ID_RE.sub("", text)
    text = _TAG_RE.sub(" ", text)
    text = _IMAGE_RE.sub(r"\1", text)
    text = _LINK_RE.sub(r"\1", text)
    text = _REF_LINK_RE.sub(r"\1", text)
    text = _LINK_DEF_RE.sub("", text)
    text = _TABLE_RULE_RE.sub("", text)
    text = _HEADING_RE.sub("", text)
    text = _BLOCKQUOTE_RE.sub("", text)
    text = _RULE_RE.sub("", text)
    text = _LIST_RE.sub("", text)
    text = _STRIKE_RE.sub(r"\1", text)
    text = _EMPHASIS_RE.sub(r"\2", text)
    text = _UNDERSCORE_EMPHASIS_RE.sub(r"\2", text)
    text = _INLINE_CODE_RE.sub(r"\1", text)
    text = _TABLE_PIPE_RE.sub(" ", text)

    return _WHITESPACE_RE.sub(" ", text).strip()


def title_from_path(path: str) -> str:
    """
    Derive a title from a document path.

    E.g. ``learn/hooks/use-state.md`` -> ``Use State``.
    """
    filename = normalize_path(path).split("/")[-1] or "Untitled"
    words = re.sub(r"[-_]", " ", filename).split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


class MarkdownParser(BaseParser):
    """
    Parses markdown documents into records.

    Front matter ``title`` and ``description`` become record metadata; the
    title falls back to the file name. Every other front-matter key is kept
    in ``metadata``.
    """

    async def parse(self, raw: str, doc_id: str) -> DocumentRecord:
        frontmatter, body = split_frontmatter(raw)

        title = frontmatter.pop("title", None)
        description = frontmatter.pop("description", None)

        try:
            return DocumentRecord(
                path=doc_id,
                title=str(title) if title else title_from_path(doc_id),
                description=str(description) if description else None,
                body=markdown_to_plain_text(body),
                content=body,
                metadata={str(key): value for key, value in frontmatter.items()},
            )
        except ValueError as e:
            raise ParseError(doc_id, str(e)) from e
