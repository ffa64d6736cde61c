"""
Search Indexer.

Case-insensitive substring search over the content behind each node. The graph
is small enough that every query rescans all records; there is no incremental
index.
"""

import json
import logging
from typing import TYPE_CHECKING, Iterator, Set

from ..config import MIN_QUERY_LENGTH
from .types import ContentRecord

if TYPE_CHECKING:
    from .store import GraphStore

logger = logging.getLogger(__name__)


def iter_searchable_text(record: ContentRecord) -> Iterator[str]:
    """Yield every populated text field of a record, across all variants."""
    yield record.name
    yield record.slug

    content = record.content
    if content.message:
        yield content.message.text
    if content.banner:
        yield content.banner.text
    if content.intro:
        yield content.intro.text
    if content.question:
        yield content.question.text
        yield from content.question.suggestions
        yield from content.question.options
    if content.multi_select:
        yield content.multi_select.text
        for option in content.multi_select.options:
            yield option.text
    if content.form and content.form.fields:
        yield json.dumps(content.form.fields, default=str)
    if content.free_chat:
        yield content.free_chat.text
    if content.accordion:
        yield content.accordion.title
        yield content.accordion.content


def record_matches(record: ContentRecord, needle: str) -> bool:
    needle = needle.lower()
    return any(needle in text.lower() for text in iter_searchable_text(record) if text)


class SearchIndexer:
    """Finds the nodes whose content matches a query."""

    def __init__(self, store: "GraphStore"):
        self.store = store

    def search(self, query: str) -> Set[str]:
        """
        Return ids of nodes whose content contains query.

        Blank queries match nothing. Nodes with a missing record never match.
        """
        needle = (query or "").strip().lower()
        if len(needle) < MIN_QUERY_LENGTH:
            return set()

        cache = {}
        matches: Set[str] = set()
        for node in self.store.iter_nodes():
            if node.content_id not in cache:
                record = self.store.get_content(node.content_id)
                cache[node.content_id] = record is not None and record_matches(record, needle)
            if cache[node.content_id]:
                matches.add(node.id)

        logger.debug(f"Search '{needle}' matched {len(matches)} node(s)")
        return matches
