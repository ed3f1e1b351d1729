"""Markup collaborator: split raw content into heading blocks.

Every format is reduced to the same shape, a list of ``HeadingBlock``
starting with the preamble (empty heading, level 0). HTML is first turned
into lightweight markdown with BeautifulSoup and then split like markdown.
"""

from dataclasses import dataclass
import re
import textwrap
from typing import List

from bs4 import BeautifulSoup, NavigableString

from pkgdocs_mcp.docs.models import ContentFormat


@dataclass(frozen=True)
class HeadingBlock:
    """A heading and the text up to the next heading."""

    heading: str
    level: int
    body: str


# Markdown patterns
_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_ATX_CLOSING = re.compile(r"[ \t]+#+$")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_BADGE_LINK = re.compile(r"\[!\[[^\]]*\]\([^)]*\)\]\([^)]*\)")
_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)

# Lines that cannot be a setext heading's text
_NOT_SETEXT_TEXT = ("-", "*", "+", "|", ">", "<", "    ", "\t")

# HTML handling
_HTML_NOISE_TAGS = ["script", "style", "nav", "header", "footer", "noscript", "svg", "form", "button", "aside"]
_HTML_HEADINGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
_HTML_BLOCK_TAGS = [
    "p", "div", "section", "article", "li", "ul", "ol", "dl", "dt", "dd",
    "table", "tr", "blockquote", "br", "hr", "details", "summary",
]

# pydoc-style text headings: ALL-CAPS at column 0
_TEXT_HEADING = re.compile(r"^[A-Z][A-Z0-9 _/-]*[A-Z0-9]$")
_OVERSTRIKE = re.compile(r".\x08")
_TEXT_PREAMBLE_HEADINGS = {"NAME", "DESCRIPTION"}


def to_plain_sections(content: str, content_format: ContentFormat) -> List[HeadingBlock]:
    """Split ``content`` into heading blocks according to its format.

    Example:
        >>> blocks = to_plain_sections("Intro\\n\\n## Usage\\nrun()", ContentFormat.MARKDOWN)
        >>> [(b.heading, b.level, b.body) for b in blocks]
        [('', 0, 'Intro'), ('Usage', 2, 'run()')]
    """
    if content_format == ContentFormat.HTML:
        return split_markdown(html_to_markdown(content))
    if content_format == ContentFormat.TEXT:
        return split_text(content)
    return split_markdown(content)


def _clean_body(lines: List[str]) -> str:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return "\n".join(line.rstrip() for line in lines[start:end])


def split_markdown(content: str) -> List[HeadingBlock]:
    """Split markdown on ATX and setext headings outside fenced code blocks."""
    text = content.replace("\r\n", "\n").replace("\r", "\n")
    text = _HTML_COMMENT.sub("", text)
    text = _BADGE_LINK.sub("", text)

    blocks: List[HeadingBlock] = []
    heading, level = "", 0
    body: List[str] = []
    fence: str = ""

    def flush() -> None:
        blocks.append(HeadingBlock(heading=heading, level=level, body=_clean_body(body)))

    for line in text.split("\n"):
        fence_match = _FENCE.match(line)
        if fence:
            body.append(line)
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                if not line.strip().lstrip(fence[0]):
                    fence = ""
            continue
        if fence_match:
            fence = fence_match.group(1)
            body.append(line)
            continue

        atx = _ATX_HEADING.match(line)
        if atx:
            flush()
            heading = _ATX_CLOSING.sub("", (atx.group(2) or "").strip()).strip()
            level = len(atx.group(1))
            body = []
            continue

        setext = _SETEXT_UNDERLINE.match(line)
        if setext and body and body[-1].strip() and not body[-1].startswith(_NOT_SETEXT_TEXT):
            title = body.pop().strip()
            flush()
            heading = title
            level = 1 if setext.group(1)[0] == "=" else 2
            body = []
            continue

        body.append(line)

    flush()
    return blocks


def html_to_markdown(html: str) -> str:
    """Reduce an HTML page to markdown headings, paragraphs and fenced code."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_HTML_NOISE_TAGS):
        if not tag.decomposed:
            tag.decompose()

    root = soup.find("main") or soup.find("article") or soup.body or soup

    for pre in root.find_all("pre"):
        code = pre.get_text().strip("\n")
        pre.replace_with(NavigableString(f"\n```\n{code}\n```\n"))

    for tag in root.find_all(_HTML_HEADINGS):
        level = int(tag.name[1])
        title = " ".join(tag.get_text().split())
        tag.replace_with(NavigableString(f"\n\n{'#' * level} {title}\n\n" if title else "\n"))

    for code in root.find_all("code"):
        text = code.get_text()
        code.replace_with(NavigableString(f"`{text}`" if text.strip() else text))

    for tag in root.find_all(_HTML_BLOCK_TAGS):
        if tag.name == "li":
            tag.insert(0, NavigableString("- "))
        tag.insert_after(NavigableString("\n"))

    lines: List[str] = []
    in_fence = False
    for line in root.get_text().split("\n"):
        if line.strip() == "```":
            in_fence = not in_fence
            lines.append("```")
            continue
        lines.append(line.rstrip() if in_fence else " ".join(line.split()))

    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip() + "\n"


def split_text(content: str) -> List[HeadingBlock]:
    """Split pydoc-style plain text on ALL-CAPS headings at column 0.

    The ``Help on ...`` banner is dropped and NAME/DESCRIPTION bodies are
    merged into the preamble. Bodies are dedented.
    """
    text = _OVERSTRIKE.sub("", content.replace("\r\n", "\n"))

    preamble: List[str] = []
    sections: List[HeadingBlock] = []
    heading = ""
    body: List[str] = []

    def flush() -> None:
        cleaned = textwrap.dedent(_clean_body(body))
        if not heading or heading in _TEXT_PREAMBLE_HEADINGS:
            if cleaned:
                preamble.append(cleaned)
        else:
            sections.append(HeadingBlock(heading=heading.title(), level=1, body=cleaned))

    for line in text.split("\n"):
        if not heading and not body and line.startswith("Help on "):
            continue
        if _TEXT_HEADING.match(line):
            flush()
            heading = line.strip()
            body = []
            continue
        body.append(line)

    flush()
    return [HeadingBlock(heading="", level=0, body="\n\n".join(preamble))] + sections
