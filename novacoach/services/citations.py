"""
Grounding citation extraction for search-augmented answers.
"""
from typing import Iterator
from urllib.parse import urlparse

from novacoach.models.generation import CapabilityResponse, Citation


def _usable_uri(uri) -> bool:
    if not isinstance(uri, str) or not uri.strip():
        return False
    return urlparse(uri.strip()).scheme in ("http", "https")


def extract_citations(response: CapabilityResponse) -> Iterator[Citation]:
    """
    Yield the cited web sources of a response, in source order.

    Entries without a usable URI are dropped. Duplicates are kept since
    ranking may carry relevance. Yields nothing when the response has no
    grounding data.
    """
    for part in response.parts:
        if part.tag != "citation" or not _usable_uri(part.uri):
            continue
        uri = part.uri.strip()
        yield Citation(title=(part.title or "").strip() or uri, uri=uri)
