"""Parse Scholar listing pages into ScholarResult records.

Scholar exposes no machine-readable metadata, so each result block is read
from its surface markup. The only awkward field is the grey author line
(``.gs_a``), which packs authors, an optional venue, an optional year and
the source domain into one string::

    A Vaswani, N Shazeer, N Parmar - Advances in neural…, 2017 - proceedings.neurips.cc
    J Smith - 2019 - arxiv.org
    J Smith, K Lee - example.com

Venue and year are independent optional groups of one anchored pattern.
Blocks missing a required field are skipped rather than reported.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple, Optional

from bs4 import BeautifulSoup, Tag

from scholar.errors import InvalidResponseError, ParseError
from scholar.models import ScholarResult

logger = logging.getLogger(__name__)

# Markup contract with the listing page
RESULT_SELECTOR = ".gs_or"
TITLE_SELECTOR = ".gs_rt"
LINK_SELECTOR = ".gs_rt a"
ABSTRACT_SELECTOR = ".gs_rs"
AUTHOR_LINE_SELECTOR = ".gs_a"
ACTIONS_SELECTOR = ".gs_flb"
PDF_LINK_SELECTOR = ".gs_or_ggsm a"
CAPTCHA_SELECTOR = "form#gs_captcha_f"

AUTHOR_LINE_PATTERN = re.compile(
    r"(?P<post_authors>\s- ((?P<conference>.*), )?((?P<year>\d{4}) - )?(?P<domain>.*))$"
)

# A numeral directly followed by a non-breaking space, e.g. "Cited by 123\xa0".
# Grouped thousands ("1,234" or "1.234") are accepted as well.
CITATIONS_PATTERN = re.compile(r"(?P<citations>\d{1,3}(?:[,.\u202f]\d{3})+|\d+)\u00a0")

# "Â\xa0" is a UTF-8 NBSP decoded as Latin-1
_MOJIBAKE_NBSP = "\u00c2\u00a0"
_SPACES = re.compile(r"\s+")
_DASHES = re.compile(r"[\u2010-\u2015\u2212]")


class AuthorLine(NamedTuple):
    """A composite author line split into its parts."""

    author: str
    domain: str
    conference: Optional[str] = None
    year: Optional[str] = None


def normalize_author_line(text: str) -> str:
    """Fold the whitespace and dash variants the page uses into ASCII."""
    text = text.replace(_MOJIBAKE_NBSP, " ")
    text = _SPACES.sub(" ", text).strip()
    return _DASHES.sub("-", text)


def parse_author_line(text: str) -> AuthorLine | None:
    """Decompose a composite author line.

    Returns None when the line does not end in the
    ``- [venue, ][year - ]domain`` suffix.
    """
    text = normalize_author_line(text)
    m = AUTHOR_LINE_PATTERN.search(text)
    if m is None:
        return None

    return AuthorLine(
        author=text[: m.start("post_authors")].strip(),
        domain=m.group("domain").strip(),
        conference=m.group("conference"),
        year=m.group("year"),
    )


def parse_citations(actions: str) -> int | None:
    """Read the citation count out of a result's action links."""
    m = CITATIONS_PATTERN.search(actions)
    if m is None:
        return None
    return int(re.sub(r"\D", "", m.group("citations")))


def _select_text(block: Tag, selector: str) -> str | None:
    node = block.select_one(selector)
    if node is None:
        return None
    return node.get_text()


def _select_href(block: Tag, selector: str) -> str | None:
    node = block.select_one(selector)
    if node is None:
        return None
    return node.get("href") or None


def parse_block(block: Tag) -> ScholarResult | None:
    """Build a record from one result block, or None if it is incomplete."""
    title = _select_text(block, TITLE_SELECTOR)
    link = _select_href(block, LINK_SELECTOR)
    abstract = _select_text(block, ABSTRACT_SELECTOR)
    author_line = _select_text(block, AUTHOR_LINE_SELECTOR)
    if title is None or link is None or abstract is None or author_line is None:
        return None
    title, abstract = title.strip(), abstract.strip()
    if not title:
        return None

    parts = parse_author_line(author_line)
    if parts is None:
        logger.debug("Unrecognised author line: %r", author_line)
        return None

    actions = _select_text(block, ACTIONS_SELECTOR)
    citations = parse_citations(actions) if actions else None

    return ScholarResult(
        title=title,
        author=parts.author,
        abstract=abstract,
        link=link,
        domain=parts.domain,
        conference=parts.conference,
        pdf_link=_select_href(block, PDF_LINK_SELECTOR),
        year=parts.year,
        citations=citations,
    )


def parse_document(document: str | bytes) -> BeautifulSoup:
    """Parse raw HTML into a tree, raising ParseError if that is impossible."""
    if not isinstance(document, (str, bytes)):
        raise ParseError(f"Expected HTML text, got {type(document).__name__}")
    try:
        return BeautifulSoup(document, "html.parser")
    except Exception as e:
        raise ParseError(f"Could not parse document: {e}") from e


def extract_results(document: str | bytes) -> list[ScholarResult]:
    """Extract every well-formed result block, in document order."""
    soup = parse_document(document)

    if soup.select_one(CAPTCHA_SELECTOR) is not None:
        raise InvalidResponseError("Scholar returned a CAPTCHA page instead of results")

    results = []
    blocks = soup.select(RESULT_SELECTOR)
    for i, block in enumerate(blocks):
        result = parse_block(block)
        if result is None:
            logger.debug("Skipping malformed result block #%d", i)
            continue
        results.append(result)

    if len(results) < len(blocks):
        logger.info("Parsed %d of %d result blocks", len(results), len(blocks))
    return results
