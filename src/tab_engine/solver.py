"""Solver — dynamic-programming search for the easiest fingering sequences.

Graph:  one layer per beat, one node per candidate; every node of layer *i*
        links to every node of layer *i+1* with the transition cost.
Recurrence (Viterbi):
        best[i][c] = intrinsic(c) + min over c' of (best[i-1][c'] + transition(c', c))
        Each node keeps its ``num_arrangements`` best partial paths, so the
        runner-up arrangements come out of the same sweep (list Viterbi).
Rests:  a rest layer passes the previous states through at zero cost, so the
        next sounded beat is compared against the nearest preceding sounded
        fingering.
Ties:   equal costs are split by lower cumulative span, then lower cumulative
        average fret, then the lower string index of the candidate's first
        note, and finally the candidate order of the layer.

Design choices:
    - Layers are generated lazily; scores of consumed layers are dropped
      and only each layer's candidates and back-pointers are kept for the
      final backtrack.
    - Per-beat failures are collected for the whole piece before
      :class:`NoFeasiblePath` is raised, so no partial path escapes.
    - ``workers > 1`` generates candidate layers on a thread pool; the DP
      sweep itself is sequential.
"""

from __future__ import annotations

import heapq
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Iterator, Optional, Sequence

from src.config import TabConfig
from .candidates import CandidateGenerator
from .cost_model import TabCostModel
from .errors import BeatError, InvalidConfiguration, NoFeasiblePath
from .models import Beat, Candidate, PathStep, Rest, TabPath, TransitionEdge

logger = logging.getLogger(__name__)

# (cost, cumulative span, cumulative average fret), compared lexicographically
Score = tuple[float, int, float]

# (predecessor node, rank of the partial path at that node); None at the start
Pointer = Optional[tuple[int, int]]

# Per node: the pointer behind each of its ranked partial paths.
# ``None`` for a rest layer, whose pointers are the identity.
BackPointers = Optional[list[list[Pointer]]]

_ROUND: int = 9


def _rank(score: Score) -> tuple[float, int, float]:
    cost, span, fret = score
    return (round(cost, _ROUND), span, round(fret, _ROUND))


def iter_layers(
    beats: Sequence[Beat],
    generator: CandidateGenerator,
    workers: int = 1,
) -> Iterator[tuple[int, Beat, list[Candidate] | BeatError]]:
    """Yield ``(index, beat, candidates_or_error)`` in beat order.

    Errors are yielded instead of raised so the caller can keep collecting
    diagnostics for the remaining beats.
    """

    def build(item: tuple[int, Beat]) -> tuple[int, Beat, list[Candidate] | BeatError]:
        index, beat = item
        try:
            return index, beat, generator.candidates_for(beat, index)
        except BeatError as exc:
            return index, beat, exc

    items = list(enumerate(beats))
    if workers <= 1:
        yield from map(build, items)
        return
    with ThreadPoolExecutor(max_workers=workers) as pool:
        yield from pool.map(build, items)


def transition_edges(
    previous: Sequence[Candidate],
    current: Sequence[Candidate],
    cost_model: TabCostModel,
) -> list[TransitionEdge]:
    """All weighted edges between two adjacent sounded layers.

    Edges are ordered source-major: the edge from ``previous[j]`` to
    ``current[c]`` sits at ``j * len(current) + c``.
    """
    return [
        TransitionEdge(a, b, cost_model.transition_cost(a.fingering, b.fingering))
        for a in previous
        for b in current
    ]


class PathOptimizer:
    """Viterbi sweep over lazily generated candidate layers.

    Args:
        generator: Produces the candidate layer of each beat.
        cost_model: Supplies transition costs.
        workers: Thread-pool size for candidate generation (1 = inline).
    """

    def __init__(
        self,
        generator: CandidateGenerator,
        cost_model: TabCostModel,
        workers: int = 1,
    ) -> None:
        self.generator = generator
        self.cost_model = cost_model
        self.workers = workers

    @classmethod
    def from_config(cls, config: TabConfig, workers: int = 1) -> "PathOptimizer":
        generator = CandidateGenerator.from_config(config)
        return cls(generator, generator.cost_model, workers=workers)

    def solve(self, beats: Iterable[Beat]) -> TabPath:
        """Find the minimum-cost fingering sequence for *beats*.

        Returns:
            A :class:`TabPath` with one step per beat.

        Raises:
            NoFeasiblePath: If any beat has no candidates; carries every
                per-beat failure of the piece.
        """
        return self.solve_arrangements(beats, 1)[0]

    def solve_arrangements(
        self, beats: Iterable[Beat], num_arrangements: int = 1
    ) -> list[TabPath]:
        """Find up to *num_arrangements* distinct fingering sequences.

        Returns:
            Paths in non-decreasing order of total cost (best first). Fewer
            are returned when the piece has fewer distinct arrangements.

        Raises:
            InvalidConfiguration: If *num_arrangements* is below 1.
            NoFeasiblePath: If any beat has no candidates.
        """
        if num_arrangements < 1:
            raise InvalidConfiguration(
                f"num_arrangements must be at least 1, got {num_arrangements}"
            )
        beats = list(beats)
        if not beats:
            return [TabPath()]

        k = num_arrangements
        failures: list[BeatError] = []

        # Live DP state: the last sounded layer and its ranked scores per node.
        frontier: list[Candidate] = []
        states: list[list[Score]] = []
        history: list[tuple[list[Candidate], BackPointers]] = []

        for index, beat, layer in iter_layers(beats, self.generator, self.workers):
            if isinstance(layer, BeatError):
                logger.warning("%s", layer)
                failures.append(layer)
                continue
            if failures:
                # The sweep is already broken; keep collecting diagnostics only.
                continue

            if isinstance(beat, Rest):
                history.append((frontier, None))
                continue

            edges = transition_edges(frontier, layer, self.cost_model)
            width = len(layer)
            new_states: list[list[Score]] = []
            pointers: list[list[Pointer]] = []
            for c, cand in enumerate(layer):
                if not frontier:
                    ranked: list[tuple[Score, Pointer]] = [((0.0, 0, 0.0), None)]
                else:
                    options = [
                        ((cost + edges[j * width + c].cost, span, fret), prev.first_string, j, r)
                        for j, prev in enumerate(frontier)
                        for r, (cost, span, fret) in enumerate(states[j])
                    ]
                    best = heapq.nsmallest(
                        k, options, key=lambda o: (_rank(o[0]), o[1], o[2], o[3])
                    )
                    ranked = [(score, (j, r)) for score, _, j, r in best]
                new_states.append(
                    [
                        (cost + cand.cost, span + cand.span, fret + cand.avg_fret)
                        for (cost, span, fret), _ in ranked
                    ]
                )
                pointers.append([pointer for _, pointer in ranked])

            logger.debug(
                "Beat %d: %d candidates against %d predecessors", index, len(layer), len(frontier)
            )
            history.append((layer, pointers))
            frontier, states = layer, new_states

        if failures:
            raise NoFeasiblePath(failures)

        paths = self._backtrack(beats, history, frontier, states, k)
        logger.info(
            "Solved %d beats: %d arrangement(s), best cost %.3f, max span %d",
            len(beats),
            len(paths),
            paths[0].total_cost,
            paths[0].max_span,
        )
        return paths

    @staticmethod
    def _backtrack(
        beats: Sequence[Beat],
        history: list[tuple[list[Candidate], BackPointers]],
        frontier: list[Candidate],
        states: list[list[Score]],
        k: int,
    ) -> list[TabPath]:
        if not states:
            # Nothing but rests.
            return [TabPath(steps=tuple(PathStep(i, b) for i, b in enumerate(beats)))]

        finals = sorted(
            ((node, rank) for node, ranked in enumerate(states) for rank in range(len(ranked))),
            key=lambda nr: (_rank(states[nr[0]][nr[1]]), frontier[nr[0]].first_string) + nr,
        )[:k]

        paths: list[TabPath] = []
        for final_node, final_rank in finals:
            steps: list[PathStep] = []
            node: Optional[int] = final_node
            rank = final_rank
            for index in range(len(beats) - 1, -1, -1):
                beat = beats[index]
                layer, pointers = history[index]
                if node is None or pointers is None:
                    # Leading rests, or a rest carrying the state through.
                    steps.append(PathStep(index, beat))
                    continue
                steps.append(PathStep(index, beat, layer[node]))
                pointer = pointers[node][rank]
                node, rank = pointer if pointer is not None else (None, 0)

            steps.reverse()
            total_cost = states[final_node][final_rank][0]
            paths.append(TabPath(steps=tuple(steps), total_cost=total_cost))
        return paths


def solve(
    beats: Iterable[Beat],
    config: TabConfig | None = None,
    workers: int = 1,
) -> TabPath:
    """Find the optimal tablature for a sequence of beats.

    Args:
        beats: Ordered beats (``Rest`` or ``Sounded``).
        config: Instrument and weight configuration. Defaults to
            :class:`TabConfig` defaults (standard tuning).
        workers: Thread-pool size for candidate generation.

    Returns:
        The minimum-cost :class:`TabPath`.
    """
    optimizer = PathOptimizer.from_config(config or TabConfig(), workers=workers)
    return optimizer.solve(beats)


def solve_arrangements(
    beats: Iterable[Beat],
    config: TabConfig | None = None,
    num_arrangements: int = 1,
    workers: int = 1,
) -> list[TabPath]:
    """Like :func:`solve`, but return the *num_arrangements* cheapest paths."""
    optimizer = PathOptimizer.from_config(config or TabConfig(), workers=workers)
    return optimizer.solve_arrangements(beats, num_arrangements)
