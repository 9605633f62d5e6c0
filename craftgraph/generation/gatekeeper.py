"""
Admission control for new items.

A combination request runs through:

    Requested -> CacheHit
    Requested -> Pending-External -> Admitted | Discarded
                                  | ExtractionFailed | ExternalCallFailed

The cache check and the external call happen outside the store lock; only
the final admission takes it, as one atomic upsert that re-checks whether
the item appeared in the meantime. Store calls run in a worker thread so
file I/O never blocks the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from craftgraph.config import GameRules
from craftgraph.errors import ExternalCallFailed, ExtractionFailed, InvalidParent
from craftgraph.generation.extraction import extract_candidate, rejection_reasons
from craftgraph.generation.llm_client import TextGenerator
from craftgraph.graph.models import NodeCandidate
from craftgraph.models import GenerationStatus
from craftgraph.storage.graph_store import GraphStore

LOG = logging.getLogger("generation.gatekeeper")


@dataclass
class GenerationOutcome:
    """Terminal state of one combination request."""

    status: GenerationStatus
    node_id: str | None = None
    phrase: str | None = None
    icon: str | None = None
    raw: str | None = None
    error: str | None = None
    reasons: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status in (GenerationStatus.CACHE_HIT, GenerationStatus.ADMITTED)

    @property
    def from_cache(self) -> bool:
        return self.status is GenerationStatus.CACHE_HIT


class GenerationGatekeeper:
    """Arbitrates creation of new nodes from pairs of existing ones."""

    def __init__(
        self,
        store: GraphStore,
        generator: TextGenerator,
        rules: GameRules | None = None,
        timeout: float | None = 60.0,
    ) -> None:
        self._store = store
        self._generator = generator
        self._rules = rules or GameRules()
        self._timeout = timeout

    async def combine(self, parent1: str, parent2: str) -> GenerationOutcome:
        snapshot = await asyncio.to_thread(self._store.snapshot)

        missing = [parent_id for parent_id in dict.fromkeys((parent1, parent2)) if parent_id not in snapshot]
        if missing:
            error = InvalidParent(missing)
            LOG.warning("%s", error)
            return GenerationOutcome(status=GenerationStatus.INVALID_PARENT, error=str(error))

        cached = snapshot.find_approved_by_pair((parent1, parent2))
        if cached is not None:
            LOG.debug("Cache hit for %s + %s -> %s", parent1, parent2, cached.id)
            return GenerationOutcome(
                status=GenerationStatus.CACHE_HIT,
                node_id=cached.id,
                phrase=cached.name,
                icon=cached.primary_icon,
            )

        try:
            completion = await asyncio.wait_for(self._generator.generate(parent1, parent2), timeout=self._timeout)
        except asyncio.TimeoutError:
            LOG.warning("Text generator timed out after %ss for %s + %s", self._timeout, parent1, parent2)
            return GenerationOutcome(
                status=GenerationStatus.EXTERNAL_CALL_FAILED,
                error=f"text generator timed out after {self._timeout}s",
            )
        except ExternalCallFailed as exc:
            return GenerationOutcome(status=GenerationStatus.EXTERNAL_CALL_FAILED, error=str(exc))
        except Exception as exc:
            LOG.exception("Text generator failed for %s + %s", parent1, parent2)
            return GenerationOutcome(
                status=GenerationStatus.EXTERNAL_CALL_FAILED,
                error=f"text generator failed: {type(exc).__name__}: {exc}",
            )
        if not isinstance(completion.text, str):
            LOG.warning("Text generator returned %s for %s + %s", type(completion.text).__name__, parent1, parent2)
            return GenerationOutcome(
                status=GenerationStatus.EXTERNAL_CALL_FAILED,
                error=f"text generator returned {type(completion.text).__name__}, expected str",
            )

        try:
            candidate = extract_candidate(completion.text)
        except ExtractionFailed as exc:
            LOG.warning("Could not extract a candidate for %s + %s: %s", parent1, parent2, exc)
            return GenerationOutcome(status=GenerationStatus.EXTRACTION_FAILED, raw=exc.raw, error=str(exc))

        reasons = rejection_reasons(candidate.phrase, self._rules)
        if reasons:
            LOG.warning("Discarded %r for %s + %s: %s", candidate.phrase, parent1, parent2, "; ".join(reasons))
            return GenerationOutcome(
                status=GenerationStatus.DISCARDED,
                phrase=candidate.phrase,
                raw=completion.text,
                error="Generated item was discarded: " + "; ".join(reasons),
                reasons=reasons,
            )

        # An existing node keeps its name and icons; it only gains the recipe.
        stored = await asyncio.to_thread(
            self._store.upsert_node,
            NodeCandidate(id=candidate.node_id, name=candidate.phrase, icons=[candidate.icon]),
            parent_pair=(parent1, parent2),
            time_created=completion.created_at,
            refresh=False,
        )
        LOG.info("Admitted %s from %s + %s", stored.id, parent1, parent2)
        return GenerationOutcome(
            status=GenerationStatus.ADMITTED,
            node_id=stored.id,
            phrase=stored.name,
            icon=stored.primary_icon,
            raw=completion.text,
        )
