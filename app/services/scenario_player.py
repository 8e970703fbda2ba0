"""Branching scenario player: index a flat node list and walk it choice by choice."""
from collections import defaultdict
from typing import Iterable

from app.core.exceptions import EmptyScenarioError, InvalidChoiceError, MalformedTreeError
from app.schemas.scenario import (
    ChoiceOutSchema,
    DecisionNodeSchema,
    PlayerStateSchema,
    VerdictSchema,
)


def _sibling_key(node: DecisionNodeSchema):
    return (node.sort_order, node.id)


class ScenarioTree:
    """Read-only index over one scenario's nodes, built once in O(n)."""

    def __init__(self, scenario_id: int, nodes: Iterable[DecisionNodeSchema]):
        self.scenario_id = scenario_id
        self.by_id: dict[int, DecisionNodeSchema] = {}
        children: dict[int, list[DecisionNodeSchema]] = defaultdict(list)
        roots = []
        for node in nodes:
            self.by_id[node.id] = node
            if node.is_root:
                roots.append(node)
            if node.parent_node_id is not None:
                children[node.parent_node_id].append(node)

        if not self.by_id:
            raise EmptyScenarioError(scenario_id)
        if len(roots) != 1:
            raise MalformedTreeError(
                f"Scenario must have exactly one root node, found {len(roots)}",
                extra={"scenario_id": scenario_id},
            )
        self.root = roots[0]
        self._children = {pid: sorted(kids, key=_sibling_key) for pid, kids in children.items()}

    def __len__(self) -> int:
        return len(self.by_id)

    def get(self, node_id: int) -> DecisionNodeSchema:
        try:
            return self.by_id[node_id]
        except KeyError:
            raise InvalidChoiceError(
                f"Node {node_id} does not belong to this scenario",
                extra={"node_id": node_id},
            ) from None

    def children(self, node: DecisionNodeSchema) -> list[DecisionNodeSchema]:
        return list(self._children.get(node.id, ()))

    def is_leaf(self, node: DecisionNodeSchema) -> bool:
        return node.id not in self._children


class ScenarioPlayer:
    """One learner's walk through a ScenarioTree.

    ``history`` holds the ids of nodes already left behind; the active node
    is the last choice made, or the root when nothing has been chosen.
    """

    def __init__(self, tree: ScenarioTree):
        self.tree = tree
        self.current_id: int | None = None
        self.history: list[int] = []

    @classmethod
    def replay(cls, tree: ScenarioTree, path: Iterable[int]) -> "ScenarioPlayer":
        """Rebuild a player by re-applying each choice in ``path``."""
        player = cls(tree)
        for node_id in path:
            player.choose(node_id)
        return player

    def active_node(self, current_id: int | None = None) -> DecisionNodeSchema:
        if current_id is None:
            current_id = self.current_id
        if current_id is None:
            return self.tree.root
        return self.tree.get(current_id)

    def children(self, node: DecisionNodeSchema | None = None) -> list[DecisionNodeSchema]:
        return self.tree.children(node or self.active_node())

    def is_leaf(self, node: DecisionNodeSchema | None = None) -> bool:
        return self.tree.is_leaf(node or self.active_node())

    @property
    def step(self) -> int:
        return len(self.history) + 1

    @property
    def path(self) -> list[int]:
        """Choices made so far, in order."""
        if self.current_id is None:
            return []
        return self.history[1:] + [self.current_id]

    def choose(self, child_id: int) -> DecisionNodeSchema:
        active = self.active_node()
        if child_id not in {c.id for c in self.tree.children(active)}:
            raise InvalidChoiceError(
                f"Node {child_id} is not a choice of node {active.id}",
                extra={"node_id": child_id, "active_node_id": active.id},
            )
        self.history.append(active.id)
        self.current_id = child_id
        return self.tree.get(child_id)

    def restart(self) -> DecisionNodeSchema:
        self.history = []
        self.current_id = None
        return self.tree.root

    def verdict(self) -> VerdictSchema | None:
        """Outcome at a leaf; None while choices remain."""
        node = self.active_node()
        if not self.is_leaf(node):
            return None
        return VerdictSchema(is_compliant=node.is_compliant, explanation=node.explanation)

    def state(self) -> PlayerStateSchema:
        node = self.active_node()
        return PlayerStateSchema(
            scenario_id=self.tree.scenario_id,
            node_id=node.id,
            node_text=node.node_text,
            step=self.step,
            path=self.path,
            choices=[ChoiceOutSchema(id=c.id, text=c.node_text) for c in self.children(node)],
            is_leaf=self.is_leaf(node),
            verdict=self.verdict(),
        )
