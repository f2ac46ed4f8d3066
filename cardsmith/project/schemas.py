"""
Pydantic Schemas for persisted projects.

A project record is what the designer saves: card documents, zone
templates, a game configuration and rule definitions. The record is
untrusted input; the loader rebuilds a validated Game from it.

Field names are snake_case in Python and camelCase on the wire; both
spellings are accepted when loading.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Discriminator, Field, Tag, model_validator
from pydantic.alias_generators import to_camel

from ..rules.definition import DEFAULT_RULE_PRIORITY, RuleDefinition, RuleStep, extract_rules


class ZoneKind(str, Enum):
    """Zone template types."""
    DECK = "deck"
    HAND = "hand"
    DISCARD = "discard"
    PLAY_AREA = "playarea"
    STACK = "stack"


class Document(BaseModel):
    """Base for persisted documents."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# =============================================================================
# Cards and zones
# =============================================================================

class CardDocument(Document):
    """A card as authored in the card designer."""
    id: Optional[str] = None
    name: str = Field(min_length=1)
    text: str = ""
    type: str = Field("Card", min_length=1)
    cost: int = 0
    power: int = 0
    toughness: int = 0
    properties: dict[str, Any] = Field(default_factory=dict)


class ZoneTemplate(Document):
    """
    A zone as authored in the zone designer.

    owner is "each" (one zone per player), "shared"/None (no owner) or a
    specific seat such as "player1".
    """
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: ZoneKind
    owner: Optional[str] = "shared"
    visibility: Optional[Literal["public", "private"]] = None
    order: Optional[Literal["ordered", "unordered"]] = None
    max_size: Optional[int] = Field(None, ge=0)
    description: str = ""


# =============================================================================
# Game configuration
# =============================================================================

class PlayerCount(Document):
    min: int = Field(2, ge=1)
    max: int = Field(2, ge=1)

    @model_validator(mode="after")
    def _ordered(self):
        if self.max < self.min:
            raise ValueError("playerCount.max must be >= playerCount.min")
        return self


class DealingRules(Document):
    """Automatic dealing at game start."""
    enabled: bool = False
    hand_size: int = Field(7, ge=0)
    shuffle_deck: bool = True
    dealing_order: Literal["round-robin", "sequential"] = "round-robin"


class InitialSetup(Document):
    dealing_rules: DealingRules = Field(default_factory=DealingRules)
    player_resources: dict[str, int] = Field(default_factory=dict)


class GameConfiguration(Document):
    player_count: PlayerCount = Field(default_factory=PlayerCount)
    initial_setup: InitialSetup = Field(default_factory=InitialSetup)


# =============================================================================
# Rules
# =============================================================================

class RuleStepDocument(Document):
    """One step of a flat rule."""
    id: str = ""
    action_type: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    label: str = ""

    def to_step(self) -> RuleStep:
        return RuleStep(
            action_type=self.action_type,
            parameters=dict(self.parameters),
            step_id=self.id,
            label=self.label,
        )


class RuleDocument(Document):
    """A rule persisted in its flat form."""
    id: str = ""
    name: str = ""
    event_type: str = ""
    condition: Optional[str] = None
    priority: int = DEFAULT_RULE_PRIORITY
    description: str = ""
    is_active: bool = True
    actions: list[RuleStepDocument] = Field(default_factory=list)

    def to_definition(self) -> RuleDefinition:
        return RuleDefinition(
            rule_id=self.id,
            name=self.name or "Unnamed Rule",
            event_type=self.event_type,
            actions=tuple(step.to_step() for step in self.actions),
            condition=self.condition or None,
            priority=self.priority,
            description=self.description,
            is_active=self.is_active,
        )


class RuleNodeData(Document):
    """Editor data on a trigger or action node."""
    label: str = ""
    event_type: Optional[str] = None
    condition: Optional[str] = None
    priority: Optional[int] = None
    action_type: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class RuleNode(Document):
    id: str = Field(min_length=1)
    type: str
    data: RuleNodeData = Field(default_factory=RuleNodeData)


class RuleEdge(Document):
    id: Optional[str] = None
    source: str
    target: str


class RuleGraph(Document):
    """Trigger and action nodes plus the edges connecting them."""
    nodes: list[RuleNode] = Field(default_factory=list)
    edges: list[RuleEdge] = Field(default_factory=list)

    def to_definitions(self) -> list[RuleDefinition]:
        nodes = [n.model_dump(by_alias=True, exclude_none=True) for n in self.nodes]
        edges = [e.model_dump(by_alias=True, exclude_none=True) for e in self.edges]
        return extract_rules(nodes, edges)


def _rule_kind(value: Any) -> str:
    if isinstance(value, RuleGraph):
        return "graph"
    if isinstance(value, dict) and ("nodes" in value or "edges" in value):
        return "graph"
    return "flat"


RuleEntry = Annotated[
    Union[Annotated[RuleGraph, Tag("graph")], Annotated[RuleDocument, Tag("flat")]],
    Discriminator(_rule_kind),
]


# =============================================================================
# The project record
# =============================================================================

class ProjectRecord(Document):
    """
    A saved project.

    rules holds either rule graphs ({nodes, edges}) or flat rule
    definitions ({id, name, eventType, condition, priority, actions}).
    """
    id: Optional[str] = None
    name: str = Field(min_length=1)
    description: str = ""
    cards: list[CardDocument] = Field(default_factory=list)
    rules: list[RuleEntry] = Field(default_factory=list)
    zones: list[ZoneTemplate] = Field(default_factory=list)
    game_config: Optional[GameConfiguration] = None
    owner_uid: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def config(self) -> GameConfiguration:
        return self.game_config or GameConfiguration()
