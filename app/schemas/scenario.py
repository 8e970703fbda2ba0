"""Pydantic schemas for scenarios, decision nodes and the player state."""
from pydantic import BaseModel, Field, model_validator


class DecisionNodeSchema(BaseModel):
    id: int
    scenario_id: int
    parent_node_id: int | None = None
    is_root: bool = False
    node_text: str
    is_compliant: bool | None = None
    explanation: str | None = None
    sort_order: int = 0

    class Config:
        from_attributes = True
        frozen = True


class ScenarioOutSchema(BaseModel):
    id: int
    title: str
    description: str | None = None
    module_id: int | None = None

    class Config:
        from_attributes = True


class PlayRequestSchema(BaseModel):
    # ids chosen so far, root excluded
    path: list[int] = Field(default_factory=list)
    choice_id: int | None = None
    restart: bool = False


class ChoiceOutSchema(BaseModel):
    id: int
    text: str


class VerdictSchema(BaseModel):
    is_compliant: bool | None
    explanation: str | None = None


class PlayerStateSchema(BaseModel):
    scenario_id: int
    node_id: int
    node_text: str
    step: int
    path: list[int]
    choices: list[ChoiceOutSchema]
    is_leaf: bool
    verdict: VerdictSchema | None = None


class NodeInSchema(BaseModel):
    """Authoring input; nodes reference each other by client-side keys."""

    key: str
    parent_key: str | None = None
    node_text: str = Field(min_length=1)
    is_compliant: bool | None = None
    explanation: str | None = None
    sort_order: int = 0


class ScenarioCreateSchema(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    module_id: int | None = None
    nodes: list[NodeInSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_tree(self):
        if not self.nodes:
            return self
        keys = [n.key for n in self.nodes]
        if len(set(keys)) != len(keys):
            raise ValueError("node keys must be unique")
        roots = [n for n in self.nodes if n.parent_key is None]
        if len(roots) != 1:
            raise ValueError("exactly one root node (without parent_key) is required")
        unknown = [n.parent_key for n in self.nodes if n.parent_key is not None and n.parent_key not in keys]
        if unknown:
            raise ValueError(f"unknown parent_key: {unknown[0]}")
        return self
