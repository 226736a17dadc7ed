from __future__ import annotations

import random
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterator, List, Optional, Sequence, Tuple, Type

from loguru import logger

from santa.services.constraints import ExclusionRelation
from santa.services.errors import UnsatisfiableError
from santa.services.validation import (
    conflicted_positions,
    count_conflicts,
    is_valid_assignment,
    ring_to_assignment,
)

DEFAULT_STRATEGY = "graph_cycle"


@dataclass(frozen=True)
class SearchConfig:
    seed: Optional[int] = None
    max_attempts: int = 10
    max_iterations: int = 100
    population_size: int = 50
    generations: int = 100
    max_restarts: int = 10
    # Node expansions per backtracking attempt; None searches exhaustively.
    max_steps: Optional[int] = 10_000


class SearchStrategy:
    """Base class for the matching algorithms.

    Subclasses implement ``_search`` and return a giver -> receiver mapping.
    ``find_assignment`` runs the shared feasibility checks, seeds the random
    source and validates whatever the subclass returns, so callers only ever
    receive a valid assignment or an ``UnsatisfiableError``.
    """

    name: ClassVar[str] = ""
    single_ring: ClassVar[bool] = True

    def find_assignment(
        self,
        participant_ids: Sequence[str],
        relation: ExclusionRelation,
        config: Optional[SearchConfig] = None,
    ) -> Dict[str, str]:
        config = config or SearchConfig()
        participants = list(participant_ids)
        if set(participants) != set(relation.participant_ids) or len(participants) != len(relation):
            raise ValueError("Participant ids do not match the exclusion relation.")

        _check_feasible(participants, relation)

        rng = random.Random(config.seed)
        logger.bind(strategy=self.name, participants=len(participants), seed=config.seed).debug(
            "Searching for assignment"
        )
        assignment = self._search(participants, relation, config, rng)

        if not is_valid_assignment(assignment, relation):
            raise UnsatisfiableError(f"The {self.name} search produced an invalid assignment.")
        return assignment

    def _search(
        self,
        participants: List[str],
        relation: ExclusionRelation,
        config: SearchConfig,
        rng: random.Random,
    ) -> Dict[str, str]:
        raise NotImplementedError


def _check_feasible(participants: Sequence[str], relation: ExclusionRelation) -> None:
    if len(participants) < 2:
        raise UnsatisfiableError("At least 2 participants are required.")

    allowed = {giver: relation.permitted(giver) for giver in participants}
    if any(not receivers for receivers in allowed.values()):
        raise UnsatisfiableError("Assignment constraints are too strict to satisfy.")

    receivable = {receiver for receivers in allowed.values() for receiver in receivers}
    if len(receivable) != len(participants):
        raise UnsatisfiableError("Assignment constraints are too strict to satisfy.")


class RetryShuffle(SearchStrategy):
    """Shuffle into a ring until one passes validation.

    Expected attempts grow quickly with constraint density, so this only
    suits sparse constraints and small groups.
    """

    name = "retry_shuffle"

    def _search(self, participants, relation, config, rng):
        ring = list(participants)
        for attempt in range(1, config.max_attempts + 1):
            rng.shuffle(ring)
            candidate = ring_to_assignment(ring)
            if is_valid_assignment(candidate, relation):
                logger.bind(strategy=self.name, attempts=attempt).debug("Valid ring found")
                return candidate

        raise UnsatisfiableError(f"No valid ring found after {config.max_attempts} shuffles.")


class MinConflicts(SearchStrategy):
    name = "min_conflicts"

    def _search(self, participants, relation, config, rng):
        ring = list(participants)
        rng.shuffle(ring)

        iterations = max(config.max_iterations, 0)
        for iteration in range(iterations + 1):
            conflicts = conflicted_positions(ring, relation)
            if not conflicts:
                logger.bind(strategy=self.name, iterations=iteration).debug("Conflicts resolved")
                return ring_to_assignment(ring)
            if iteration == iterations:
                break
            self._repair(ring, rng.choice(conflicts), relation, rng)

        raise UnsatisfiableError(
            f"{len(conflicts)} conflicting pairs remain after {iterations} iterations."
        )

    @staticmethod
    def _repair(ring: List[str], position: int, relation: ExclusionRelation, rng: random.Random) -> None:
        """Swap ``position`` with the partner giving the fewest conflicts."""
        best_score: Optional[int] = None
        best_partners: List[int] = []
        for partner in range(len(ring)):
            if partner == position:
                continue
            ring[position], ring[partner] = ring[partner], ring[position]
            score = count_conflicts(ring, relation)
            ring[position], ring[partner] = ring[partner], ring[position]

            if best_score is None or score < best_score:
                best_score, best_partners = score, [partner]
            elif score == best_score:
                best_partners.append(partner)

        partner = rng.choice(best_partners)
        ring[position], ring[partner] = ring[partner], ring[position]


@dataclass(frozen=True)
class GeneticOutcome:
    ring: Tuple[str, ...]
    fitness: int

    @property
    def perfect(self) -> bool:
        return self.fitness == len(self.ring)


def ring_fitness(ring: Sequence[str], relation: ExclusionRelation) -> int:
    # +1 per valid edge, -1 per excluded or self edge.
    return len(ring) - 2 * count_conflicts(ring, relation)


class GeneticSearch(SearchStrategy):
    """Evolve a population of rings towards zero conflicts.

    ``evolve`` exposes the best ring found even when it still has conflicts;
    ``find_assignment`` only accepts a perfect one.
    """

    name = "genetic"

    def evolve(
        self,
        participant_ids: Sequence[str],
        relation: ExclusionRelation,
        config: Optional[SearchConfig] = None,
    ) -> GeneticOutcome:
        config = config or SearchConfig()
        if len(participant_ids) < 2:
            raise UnsatisfiableError("At least 2 participants are required.")
        return self._evolve(list(participant_ids), relation, config, random.Random(config.seed))

    def _search(self, participants, relation, config, rng):
        outcome = self._evolve(participants, relation, config, rng)
        if not outcome.perfect:
            conflicts = (len(outcome.ring) - outcome.fitness) // 2
            raise UnsatisfiableError(
                f"Genetic search ended with {conflicts} conflicting pairs.",
                best_fitness=outcome.fitness,
            )
        return ring_to_assignment(outcome.ring)

    def _evolve(
        self,
        participants: List[str],
        relation: ExclusionRelation,
        config: SearchConfig,
        rng: random.Random,
    ) -> GeneticOutcome:
        size = len(participants)
        population: List[List[str]] = []
        for _ in range(max(config.population_size, 2)):
            individual = list(participants)
            rng.shuffle(individual)
            population.append(individual)

        scores = [ring_fitness(individual, relation) for individual in population]
        best_index = max(range(len(population)), key=scores.__getitem__)
        best_ring, best_fitness = list(population[best_index]), scores[best_index]

        for _ in range(config.generations):
            if best_fitness == size:
                break

            offspring: List[List[str]] = []
            for _ in population:
                first = self._select(population, scores, rng)
                second = self._select(population, scores, rng)
                child = self._crossover(first, second, rng)
                self._mutate(child, rng)
                offspring.append(child)

            population = offspring
            scores = [ring_fitness(individual, relation) for individual in population]
            for individual, score in zip(population, scores):
                if score > best_fitness:
                    best_ring, best_fitness = list(individual), score

        logger.bind(strategy=self.name, generations=config.generations).debug(
            "Best fitness {fitness} of {size}", fitness=best_fitness, size=size
        )
        return GeneticOutcome(ring=tuple(best_ring), fitness=best_fitness)

    @staticmethod
    def _select(population: List[List[str]], scores: List[int], rng: random.Random) -> List[str]:
        first, second = rng.randrange(len(population)), rng.randrange(len(population))
        return population[first] if scores[first] >= scores[second] else population[second]

    @staticmethod
    def _crossover(first: List[str], second: List[str], rng: random.Random) -> List[str]:
        cut = rng.randrange(len(first))
        child = first[:cut] + second[cut:]

        present = set(child)
        missing = [participant for participant in first if participant not in present]
        seen = set()
        for index, participant in enumerate(child):
            if participant in seen:
                child[index] = missing.pop(0)
            seen.add(child[index])
        return child

    @staticmethod
    def _mutate(child: List[str], rng: random.Random) -> None:
        first, second = rng.sample(range(len(child)), 2)
        child[first], child[second] = child[second], child[first]


class GraphCycle(SearchStrategy):
    """Depth-first search for a Hamiltonian cycle over permitted pairs.

    An attempt that finishes without hitting ``max_steps`` has explored every
    path from its start node, which proves no cycle exists at all.
    """

    name = "graph_cycle"

    def _search(self, participants, relation, config, rng):
        adjacency = {giver: relation.permitted(giver) for giver in participants}
        starts = list(participants)
        rng.shuffle(starts)

        attempts = starts[: max(config.max_restarts, 1)]
        for attempt, start in enumerate(attempts, start=1):
            cycle, exhausted = self._hamiltonian_cycle(start, adjacency, config.max_steps, rng)
            if cycle is not None:
                logger.bind(strategy=self.name, attempts=attempt).debug("Hamiltonian cycle found")
                return ring_to_assignment(cycle)
            if exhausted:
                raise UnsatisfiableError("No gift cycle exists over the permitted pairs.")
            logger.bind(strategy=self.name, start=start).debug("Step budget exhausted, restarting")

        raise UnsatisfiableError(f"No gift cycle found after {len(attempts)} restarts.")

    @staticmethod
    def _hamiltonian_cycle(
        start: str,
        adjacency: Dict[str, List[str]],
        max_steps: Optional[int],
        rng: random.Random,
    ) -> Tuple[Optional[List[str]], bool]:
        size = len(adjacency)
        path = [start]
        visited = {start}

        def options(node: str) -> Iterator[str]:
            choices = [receiver for receiver in adjacency[node] if receiver not in visited]
            rng.shuffle(choices)
            return iter(choices)

        stack = [options(start)]
        steps = 0
        while stack:
            if len(path) == size and start in adjacency[path[-1]]:
                return list(path), False

            node = next(stack[-1], None)
            if node is None or len(path) == size:
                stack.pop()
                visited.discard(path.pop())
                continue

            steps += 1
            if max_steps is not None and steps > max_steps:
                return None, False

            path.append(node)
            visited.add(node)
            stack.append(options(node))

        return None, True


class _StepBudgetExceeded(Exception):
    pass


class DerangementBacktracking(SearchStrategy):
    """Backtracking over any derangement, several cycles allowed."""

    name = "derangement"
    single_ring = False

    def _search(self, participants, relation, config, rng):
        allowed = {giver: relation.permitted(giver) for giver in participants}
        order = list(participants)

        for attempt in range(1, max(config.max_attempts, 1) + 1):
            rng.shuffle(order)
            assignments: Dict[str, str] = {}
            steps = 0

            def backtrack(remaining_receivers: set) -> bool:
                nonlocal steps
                if len(assignments) == len(order):
                    return True

                unassigned = [giver for giver in order if giver not in assignments]
                giver = min(
                    unassigned,
                    key=lambda g: sum(1 for r in allowed[g] if r in remaining_receivers),
                )
                choices = [receiver for receiver in allowed[giver] if receiver in remaining_receivers]
                rng.shuffle(choices)
                for receiver in choices:
                    steps += 1
                    if config.max_steps is not None and steps > config.max_steps:
                        raise _StepBudgetExceeded
                    assignments[giver] = receiver
                    remaining_receivers.remove(receiver)
                    if backtrack(remaining_receivers):
                        return True
                    remaining_receivers.add(receiver)
                    assignments.pop(giver, None)
                return False

            try:
                found = backtrack(set(order))
            except _StepBudgetExceeded:
                logger.bind(strategy=self.name, attempt=attempt).debug("Step budget exhausted, reshuffling")
                continue

            if found:
                logger.bind(strategy=self.name, attempts=attempt).debug("Derangement found")
                return dict(assignments)
            raise UnsatisfiableError("No derangement satisfies the constraints.")

        raise UnsatisfiableError(
            f"Failed to generate assignments after {config.max_attempts} attempts."
        )


STRATEGIES: Dict[str, Type[SearchStrategy]] = {
    strategy.name: strategy
    for strategy in (RetryShuffle, MinConflicts, GeneticSearch, GraphCycle, DerangementBacktracking)
}


def get_strategy(name: str) -> SearchStrategy:
    try:
        return STRATEGIES[name]()
    except KeyError:
        choices = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"Unknown strategy {name!r}. Choose one of: {choices}.") from None


def find_assignment(
    participant_ids: Sequence[str],
    relation: ExclusionRelation,
    config: Optional[SearchConfig] = None,
    strategy: str = DEFAULT_STRATEGY,
) -> Dict[str, str]:
    return get_strategy(strategy).find_assignment(participant_ids, relation, config)
