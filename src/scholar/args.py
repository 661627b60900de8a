"""Structured Scholar queries and their canonical request URLs."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.parse import quote, urlencode

from scholar.errors import InvalidServiceError, RequiredFieldError

logger = logging.getLogger(__name__)


class Services(enum.Enum):
    """Search services a query can be sent to."""

    SCHOLAR = "scholar"

    @classmethod
    def from_name(cls, name: str) -> "Services":
        try:
            return cls(name.lower())
        except ValueError:
            raise InvalidServiceError(f"Unknown service: {name!r}") from None


BASE_URLS = {
    Services.SCHOLAR: "https://scholar.google.com/scholar",
}

# scisbd accepts 0 (relevance), 1 (abstracts only) and 2 (everything)
SORT_MODES = range(3)


def get_base_url(service: Services) -> str:
    return BASE_URLS[service]


@dataclass(frozen=True)
class ScholarArgs:
    """Search parameters for a single Scholar listing page.

    Every optional field defaults to ``None``, which leaves the parameter
    out of the request entirely rather than sending a false/zero value.
    """

    # q
    query: str
    # cites: citation id that triggers "cited by"
    cite_id: Optional[str] = None
    # as_ylo: results from this year onwards
    from_year: Optional[int] = None
    # as_yhi: results up to this year
    to_year: Optional[int] = None
    # scisbd: 0 relevance, 1 abstracts only, 2 everything
    sort_by: Optional[int] = None
    # cluster: query all versions; not combined with cites
    cluster_id: Optional[str] = None
    # hl: interface language, e.g. "en"
    lang: Optional[str] = None
    # lr: languages to restrict results to, e.g. "lang_fr|lang_en"
    lang_limit: Optional[str] = None
    # num: max results
    limit: Optional[int] = None
    # start: result offset, used with limit for pagination
    offset: Optional[int] = None
    # safe: active / off
    adult_filtering: Optional[bool] = None
    # filter: 1 for similar results, 0 for omitted
    include_similar_results: Optional[bool] = None
    # as_vis: 1 to include citation-only entries, otherwise 0
    include_citations: Optional[bool] = None

    @property
    def service(self) -> Services:
        return Services.SCHOLAR

    def get_limit(self) -> int:
        return self.limit if self.limit is not None else 0

    def get_url(self) -> str:
        return build_url(self)


def _text(value) -> str:
    return str(value)


def _number(value) -> str:
    return str(int(value))


def _sort_mode(value) -> str | None:
    if value not in SORT_MODES:
        logger.debug("Dropping out-of-range sort mode %r", value)
        return None
    return _number(value)


def _flag(on: str, off: str) -> Callable[[bool], str]:
    def render(value: bool) -> str:
        return on if value else off
    return render


# (parameter, field, renderer) in emission order
PARAMETERS: list[tuple[str, str, Callable]] = [
    ("q", "query", _text),
    ("cites", "cite_id", _text),
    ("as_ylo", "from_year", _number),
    ("as_yhi", "to_year", _number),
    ("scisbd", "sort_by", _sort_mode),
    ("cluster", "cluster_id", _text),
    ("hl", "lang", _text),
    ("lr", "lang_limit", _text),
    ("num", "limit", _number),
    ("start", "offset", _number),
    ("safe", "adult_filtering", _flag("active", "off")),
    ("filter", "include_similar_results", _flag("1", "0")),
    ("as_vis", "include_citations", _flag("1", "0")),
]


def query_params(args: ScholarArgs) -> list[tuple[str, str]]:
    """Ordered ``(name, value)`` pairs for every parameter that is set."""
    params = []
    for name, field_name, render in PARAMETERS:
        value = getattr(args, field_name)
        if value is None:
            continue
        rendered = render(value)
        if rendered is not None:
            params.append((name, rendered))
    return params


def build_url(args: ScholarArgs) -> str:
    """Render *args* into the canonical request URL.

    Raises RequiredFieldError when the query string is empty.
    """
    if not args.query:
        raise RequiredFieldError("query must not be empty")

    encoded = urlencode(query_params(args), quote_via=quote)
    return f"{get_base_url(args.service)}?{encoded}"
