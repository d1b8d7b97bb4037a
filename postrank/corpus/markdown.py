"""Markdown to plain text conversion for blog posts."""

import re
from typing import Any

import yaml

# Regex patterns
FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*\n", re.DOTALL)
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
LINK_PATTERN = re.compile(r"\[([^\]]+)\]\([^)]*\)")
REFERENCE_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\[[^\]]*\]")
LINK_DEFINITION_PATTERN = re.compile(r"^\s{0,3}\[[^\]]+\]:\s+\S+.*$")
AUTOLINK_PATTERN = re.compile(r"<((?:https?|mailto):[^>\s]+)>")
HTML_TAG_PATTERN = re.compile(r"</?[a-zA-Z][^>]*>")
HEADING_PATTERN = re.compile(r"^\s{0,3}#{1,6}\s+(.*?)\s*#*\s*$")
SETEXT_PATTERN = re.compile(r"^\s{0,3}(=+|-+)\s*$")
RULE_PATTERN = re.compile(r"^\s{0,3}([-*_])(\s*\1){2,}\s*$")
BLOCKQUOTE_PATTERN = re.compile(r"^\s*(>\s?)+")
LIST_MARKER_PATTERN = re.compile(r"^(\s*)([-*+]|\d+[.)])\s+")
STAR_EMPHASIS_PATTERN = re.compile(r"(\*\*|\*)(?=\S)(.+?)(?<=\S)\1")
UNDERSCORE_EMPHASIS_PATTERN = re.compile(r"(?<!\w)(__|_)(?=\S)(.+?)(?<=\S)\1(?!\w)")
INLINE_CODE_PATTERN = re.compile(r"`([^`]*)`")
BLANK_RUN_PATTERN = re.compile(r"\n{3,}")


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Extract YAML frontmatter from post content.

    Returns:
        Tuple of (frontmatter dict, remaining content)
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        frontmatter = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError:
        frontmatter = {}
    if not isinstance(frontmatter, dict):
        frontmatter = {}

    remaining = content[match.end() :]
    return frontmatter, remaining


def _inline_to_text(line: str) -> str:
    line = IMAGE_PATTERN.sub(r"\1", line)
    line = LINK_PATTERN.sub(r"\1", line)
    line = REFERENCE_LINK_PATTERN.sub(r"\1", line)
    line = AUTOLINK_PATTERN.sub(r"\1", line)
    line = HTML_TAG_PATTERN.sub("", line)
    line = INLINE_CODE_PATTERN.sub(r"\1", line)
    # nested emphasis like ***x*** needs two passes
    for _ in range(2):
        line = STAR_EMPHASIS_PATTERN.sub(r"\2", line)
        line = UNDERSCORE_EMPHASIS_PATTERN.sub(r"\2", line)
    return line


def markdown_to_plain_text(markdown: str) -> str:
    """Strip markdown syntax, keeping the readable text.

    Code blocks keep their content without the fences. Link and image
    targets are dropped in favor of their text.
    """
    _, body = parse_frontmatter(markdown.replace("\r\n", "\n").replace("\r", "\n"))

    lines: list[str] = []
    in_fence = False
    for raw in body.split("\n"):
        if FENCE_PATTERN.match(raw):
            in_fence = not in_fence
            continue
        if in_fence:
            lines.append(raw.rstrip())
            continue

        if LINK_DEFINITION_PATTERN.match(raw) or RULE_PATTERN.match(raw):
            continue
        if SETEXT_PATTERN.match(raw) and lines and lines[-1].strip():
            continue

        line = BLOCKQUOTE_PATTERN.sub("", raw)
        heading = HEADING_PATTERN.match(line)
        if heading:
            line = heading.group(1)
        line = LIST_MARKER_PATTERN.sub(r"\1", line)
        lines.append(_inline_to_text(line).rstrip())

    text = "\n".join(lines).strip("\n")
    return BLANK_RUN_PATTERN.sub("\n\n", text)


def extract_title(plain_text: str) -> str:
    """First non-blank line of the plain text."""
    for line in plain_text.split("\n"):
        if line.strip():
            return line.strip()
    return ""
