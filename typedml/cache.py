"""Per-document parse cache for editor tooling, keyed by document identity and version."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Optional

from .document import TMLDocument
from .logger import Logger
from .parser import ParserConfig, parse_tml
from .position import PositionLike
from .position_index import IndexTarget, PositionIndex


@dataclass
class CachedDocument:
    version: Hashable
    document: TMLDocument
    index: PositionIndex


@dataclass
class DocumentCache:
    config: Optional[ParserConfig] = None
    entries: dict[str, CachedDocument] = field(default_factory=dict)

    def __post_init__(self):
        self.logger = Logger(config={"name": "TML Cache"}).logger

    def get(self, uri: str, version: Hashable, source: str) -> CachedDocument:
        cached = self.entries.get(uri)
        if cached is not None and cached.version == version:
            self.logger.debug(f"Cache hit for {uri} at version {version}")
            return cached
        document = parse_tml(source, config=self.config)
        cached = CachedDocument(version=version, document=document, index=PositionIndex(document.nodes))
        self.entries[uri] = cached
        self.logger.debug(f"Parsed {uri} at version {version} ({len(document)} root nodes)")
        return cached

    def find_node_at_position(
        self, uri: str, version: Hashable, source: str, position: PositionLike
    ) -> Optional[IndexTarget]:
        return self.get(uri, version, source).index.find_node_at_position(position)

    def invalidate(self, uri: str) -> None:
        self.entries.pop(uri, None)

    def clear(self) -> None:
        self.entries.clear()

    def __contains__(self, uri: object) -> bool:
        return uri in self.entries

    def __len__(self) -> int:
        return len(self.entries)


__all__ = ["CachedDocument", "DocumentCache"]
