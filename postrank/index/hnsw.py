"""Hierarchical navigable small-world graph for approximate k-NN search.

Nodes are assigned a random top layer on insertion (exponentially decaying
probability per layer), and linked to their closest existing nodes on every
layer from that top layer down to 0. Queries descend greedily from the
entry point and finish with a beam search on layer 0.

Degree caps: ``m`` links per node on layers >= 1, ``2 * m`` on layer 0.
Overflowing neighbor lists are pruned back to the cap keeping the closest
links.
"""

import heapq
import logging
import math
import random
import threading
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Sequence

import numpy as np

from .distance import DistanceFn, cosine_distance
from .errors import DimensionMismatchError, DuplicateIdError, IndexStateError

log = logging.getLogger(__name__)

# (distance, insertion order, item id); insertion order breaks distance ties
_Candidate = tuple[float, int, str]


class Neighbor(NamedTuple):
    item_id: str
    distance: float


@dataclass
class _Node:
    item_id: str
    vector: np.ndarray
    level: int
    order: int
    links: list[list[str]] = field(default_factory=list)


class SmallWorldIndex:
    """Approximate nearest-neighbor index over fixed-dimension vectors.

    The index is populated with :meth:`insert` (or :meth:`add_items`), then
    frozen with :meth:`freeze`, after which only :meth:`knn_search` is
    allowed. Frozen indexes are safe to query from many threads.
    """

    def __init__(
        self,
        *,
        m: int = 15,
        ef_construction: int = 200,
        ef_search: int = 50,
        level_lambda: float | None = None,
        dimensions: int | None = None,
        distance: DistanceFn = cosine_distance,
        rng: random.Random | None = None,
    ):
        if m < 2:
            raise ValueError(f"m must be at least 2, got {m}")
        if ef_construction < 1 or ef_search < 1:
            raise ValueError("ef_construction and ef_search must be positive")
        if dimensions is not None and dimensions < 1:
            raise ValueError(f"dimensions must be positive, got {dimensions}")

        self.m = m
        self.m0 = 2 * m
        self.ef_construction = ef_construction
        self.ef_search = ef_search
        self.level_lambda = (
            level_lambda if level_lambda is not None else 1.0 / math.log(m)
        )
        self._dimensions = dimensions
        self._distance = distance
        self._rng = rng or random.Random()

        self._nodes: dict[str, _Node] = {}
        self._entry: str | None = None
        self._top_layer = -1
        self._frozen = False
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._nodes

    @property
    def dimensions(self) -> int | None:
        return self._dimensions

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def entry_point(self) -> str | None:
        return self._entry

    @property
    def max_layer(self) -> int:
        """Top layer of the graph, -1 when empty."""
        return self._top_layer

    def level_of(self, item_id: str) -> int:
        return self._nodes[item_id].level

    def neighbors(self, item_id: str, layer: int = 0) -> tuple[str, ...]:
        """Ids linked from ``item_id`` on ``layer`` (empty above its level)."""
        node = self._nodes[item_id]
        if layer < 0 or layer > node.level:
            return ()
        return tuple(node.links[layer])

    def freeze(self) -> None:
        """Switch from populating to queryable. Cannot be undone."""
        with self._lock:
            self._frozen = True
        log.info(
            f"Index frozen: {len(self._nodes)} items, top layer {self._top_layer}"
        )

    # =========================================================================
    # POPULATION
    # =========================================================================

    def insert(self, item_id: str, vector: Sequence[float]) -> None:
        """Add one item.

        Raises:
            ValueError: empty ``item_id``
            DimensionMismatchError: vector length differs from the index's
            DuplicateIdError: ``item_id`` already present
            IndexStateError: index already frozen
        """
        if not item_id:
            raise ValueError("item_id must be a non-empty string")

        with self._lock:
            if self._frozen:
                raise IndexStateError("Index is frozen; rebuild it to add items")
            if item_id in self._nodes:
                raise DuplicateIdError(item_id)

            arr = self._coerce(vector)
            if self._dimensions is None:
                self._dimensions = arr.shape[0]

            level = self._random_level()
            node = _Node(
                item_id=item_id,
                vector=arr,
                level=level,
                order=len(self._nodes),
                links=[[] for _ in range(level + 1)],
            )

            if self._entry is None:
                self._nodes[item_id] = node
                self._entry = item_id
                self._top_layer = level
                log.debug(f"Inserted {item_id} as first entry point (level {level})")
                return

            self._nodes[item_id] = node
            self._connect(node)

            if level > self._top_layer:
                self._entry = item_id
                self._top_layer = level
            log.debug(f"Inserted {item_id} at level {level}")

    def add_items(self, items: Iterable[tuple[str, Sequence[float]]]) -> int:
        """Insert ``(item_id, vector)`` pairs in order. Returns the count."""
        count = 0
        for item_id, vector in items:
            self.insert(item_id, vector)
            count += 1
        return count

    def _random_level(self) -> int:
        # 1 - random() is in (0, 1], so log() is always defined
        uniform = 1.0 - self._rng.random()
        return int(-math.log(uniform) * self.level_lambda)

    def _coerce(self, vector: Sequence[float]) -> np.ndarray:
        arr = np.asarray(vector, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError(f"Expected a flat vector, got shape {arr.shape}")
        if self._dimensions is not None and arr.shape[0] != self._dimensions:
            raise DimensionMismatchError(self._dimensions, arr.shape[0])
        return arr

    def _connect(self, node: _Node) -> None:
        entry = self._nodes[self._entry]
        entry_points: list[_Candidate] = [
            (self._distance(node.vector, entry.vector), entry.order, entry.item_id)
        ]

        for layer in range(self._top_layer, node.level, -1):
            entry_points = self._search_layer(node.vector, entry_points, 1, layer)

        ef = max(self.ef_construction, self.m)
        for layer in range(min(node.level, self._top_layer), -1, -1):
            candidates = self._search_layer(node.vector, entry_points, ef, layer)
            selected = [c for c in candidates if c[2] != node.item_id][: self.m]
            node.links[layer] = [item_id for _, _, item_id in selected]
            for _, _, item_id in selected:
                self._link_back(self._nodes[item_id], node.item_id, layer)
            entry_points = candidates

    def _link_back(self, neighbor: _Node, item_id: str, layer: int) -> None:
        links = neighbor.links[layer]
        links.append(item_id)
        cap = self.m0 if layer == 0 else self.m
        if len(links) <= cap:
            return

        ranked = sorted(
            (
                self._distance(neighbor.vector, self._nodes[link].vector),
                self._nodes[link].order,
                link,
            )
            for link in links
        )
        neighbor.links[layer] = [link for _, _, link in ranked[:cap]]

    # =========================================================================
    # QUERY
    # =========================================================================

    def knn_search(self, query: Sequence[float], k: int) -> list[Neighbor]:
        """Return up to ``k`` nearest items ordered by ascending distance.

        Fewer than ``k`` results come back only when the index holds fewer
        than ``k`` items. An empty index yields an empty list.
        """
        if not self._frozen:
            raise IndexStateError("Index is still populating; call freeze() first")

        arr = self._coerce(query)
        if k <= 0 or self._entry is None:
            return []

        entry = self._nodes[self._entry]
        entry_points: list[_Candidate] = [
            (self._distance(arr, entry.vector), entry.order, entry.item_id)
        ]
        for layer in range(self._top_layer, 0, -1):
            entry_points = self._search_layer(arr, entry_points, 1, layer)

        found = self._search_layer(arr, entry_points, max(self.ef_search, k), 0)

        if len(found) < min(k, len(self._nodes)):
            found = self._fill_exhaustive(arr, found)

        return [Neighbor(item_id, distance) for distance, _, item_id in found[:k]]

    def _search_layer(
        self,
        query: np.ndarray,
        entry_points: list[_Candidate],
        ef: int,
        layer: int,
    ) -> list[_Candidate]:
        visited = {item_id for _, _, item_id in entry_points}
        candidates = list(entry_points)
        heapq.heapify(candidates)
        # max-heap of the best ef found so far
        results = [(-dist, -order, item_id) for dist, order, item_id in entry_points]
        heapq.heapify(results)
        while len(results) > ef:
            heapq.heappop(results)

        while candidates:
            dist, _, item_id = heapq.heappop(candidates)
            if len(results) >= ef and dist > -results[0][0]:
                break

            for link in self._nodes[item_id].links[layer]:
                if link in visited:
                    continue
                visited.add(link)

                linked = self._nodes[link]
                link_dist = self._distance(query, linked.vector)
                if len(results) < ef or link_dist < -results[0][0]:
                    heapq.heappush(candidates, (link_dist, linked.order, link))
                    heapq.heappush(results, (-link_dist, -linked.order, link))
                    if len(results) > ef:
                        heapq.heappop(results)

        return sorted((-neg_dist, -neg_order, item_id) for neg_dist, neg_order, item_id in results)

    def _fill_exhaustive(
        self, query: np.ndarray, found: list[_Candidate]
    ) -> list[_Candidate]:
        seen = {item_id for _, _, item_id in found}
        log.debug(
            f"Graph search reached {len(found)} of {len(self._nodes)} items; "
            "scanning the rest"
        )
        rest = [
            (self._distance(query, node.vector), node.order, node.item_id)
            for node in self._nodes.values()
            if node.item_id not in seen
        ]
        return sorted(found + rest)
