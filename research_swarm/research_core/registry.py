from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from research_swarm.models.research import EvidenceChunk, SearchResult, SourceRecord

UNKNOWN_SOURCE_TITLE = "Unknown Source"


@dataclass(frozen=True, slots=True)
class LocalCitationIndex:
    """Sources one dimension's own retrieval surfaced, keyed by global id."""

    dimension_label: str
    records: tuple[SourceRecord, ...] = ()

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(r.id for r in self.records)

    def get(self, source_id: int) -> SourceRecord | None:
        for record in self.records:
            if record.id == source_id:
                return record
        return None

    def render(self) -> str:
        return "\n".join(f"[Source ID {r.id}]: {r.title} ({r.url})" for r in self.records)


@dataclass(frozen=True, slots=True)
class Bibliography:
    records: tuple[SourceRecord, ...] = ()

    def __len__(self) -> int:
        return len(self.records)

    def render(self) -> str:
        return "\n".join(f"[{r.id}] {r.title}: {r.url}" for r in self.records)


class SourceRegistry:
    """Deduplicating URL -> SourceRecord map with first-seen id assignment.

    Ids start at 1 and follow encounter order: dimensions in planned order,
    then chunks in the order retrieval returned them. The first title seen
    for a URL is kept.
    """

    def __init__(self) -> None:
        self._by_url: dict[str, SourceRecord] = {}
        self._local: list[LocalCitationIndex] = []
        self._sealed = False

    def register(self, chunks: Iterable[EvidenceChunk]) -> tuple[SourceRecord, ...]:
        """Register chunks in order; return the distinct records they map to."""
        if self._sealed:
            raise RuntimeError("SourceRegistry has already ingested search results")
        seen: dict[int, SourceRecord] = {}
        for chunk in chunks:
            url = (chunk.url or "").strip()
            if not url:
                continue
            record = self._by_url.get(url)
            if record is None:
                record = SourceRecord(
                    id=len(self._by_url) + 1,
                    url=url,
                    title=(chunk.title or "").strip() or UNKNOWN_SOURCE_TITLE,
                )
                self._by_url[url] = record
            seen.setdefault(record.id, record)
        return tuple(seen.values())

    def ingest(self, results: Sequence[SearchResult]) -> None:
        """Register every result in dimension order, then freeze the registry."""
        for result in results:
            records = self.register(result.chunks)
            self._local.append(
                LocalCitationIndex(dimension_label=result.dimension.label, records=records)
            )
        self._sealed = True

    def all_records(self) -> list[SourceRecord]:
        return sorted(self._by_url.values(), key=lambda r: r.id)

    def local_index_for(self, dimension_index: int) -> LocalCitationIndex:
        if not self._sealed:
            raise RuntimeError("Local indexes are only available after ingest()")
        return self._local[dimension_index]

    def bibliography(self) -> Bibliography:
        return Bibliography(records=tuple(self.all_records()))

    def __len__(self) -> int:
        return len(self._by_url)
