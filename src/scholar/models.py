"""Data models for Scholar results."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class ScholarResult:
    """A single result block from a Scholar listing page."""

    title: str
    author: str
    abstract: str
    link: str
    domain: str
    conference: Optional[str] = None
    pdf_link: Optional[str] = None
    year: Optional[str] = None
    citations: Optional[int] = None

    def has_pdf(self) -> bool:
        return bool(self.pdf_link)

    def to_dict(self) -> dict:
        return asdict(self)
