"""
Core type definitions for convoflow.

Nodes are lightweight placements on the canvas that reference a ContentRecord
by id. Edges are directed transitions between nodes. LinearOrder is the derived
playback sequence and is never stored on its own.

All models serialise with camelCase aliases so snapshots and event payloads
match what the preview surface expects.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ToolType(StrEnum):
    """Kinds of conversational components a ContentRecord can hold."""
    MESSAGE = "message"
    QUESTION = "question"
    BANNER = "banner"
    MULTI_SELECT = "multiSelect"
    FORM = "form"
    FREE_CHAT = "freeChat"
    ACCORDION = "accordion"
    INTRO = "intro"


class ClickModifier(StrEnum):
    """Keyboard modifier held while clicking a node."""
    NONE = "none"
    SHIFT = "shift"
    TOGGLE = "toggle"  # ctrl on most platforms, cmd on macOS


class Position(CamelModel):
    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float, dy: float) -> "Position":
        return Position(x=self.x + dx, y=self.y + dy)


# =============================================================================
# Content variants
# =============================================================================

class MessageBlock(CamelModel):
    text: str = ""
    rich_text: bool = False


class BannerBlock(CamelModel):
    text: str = ""
    type: str = "default"


class IntroBlock(CamelModel):
    text: str = ""
    type: str = "default"


class QuestionBlock(CamelModel):
    text: str = ""
    image: Optional[str] = None
    suggestions: List[str] = Field(default_factory=list)
    options: List[str] = Field(default_factory=list)


class MultiSelectOption(CamelModel):
    text: str = ""
    image: Optional[str] = None
    icon: Optional[str] = None


class MultiSelectBlock(CamelModel):
    text: str = ""
    options: List[MultiSelectOption] = Field(default_factory=list)
    max_selection: int = 1


class FormBlock(CamelModel):
    # Field definitions are owned by the form editor; kept as raw dicts.
    fields: List[Dict[str, Any]] = Field(default_factory=list)


class FreeChatBlock(CamelModel):
    text: str = ""


class AccordionBlock(CamelModel):
    title: str = ""
    content: str = ""


class ComponentContent(CamelModel):
    """
    Variant payload of a ContentRecord.

    Several blocks may be populated at once: a question can carry a banner
    and an intro text add-on, for example.
    """
    message: Optional[MessageBlock] = None
    banner: Optional[BannerBlock] = None
    intro: Optional[IntroBlock] = Field(
        default=None,
        validation_alias=AliasChoices("intro", "text"),
        serialization_alias="text",
    )
    question: Optional[QuestionBlock] = None
    multi_select: Optional[MultiSelectBlock] = None
    form: Optional[FormBlock] = None
    free_chat: Optional[FreeChatBlock] = None
    accordion: Optional[AccordionBlock] = None


class ContentRecord(CamelModel):
    """
    Editable payload behind a node.

    Owned independently of the graph: several nodes may reference the same
    record, and a record survives the deletion of the nodes pointing at it.
    """
    id: str
    name: str = ""
    slug: str = ""
    tool_type: ToolType = Field(
        default=ToolType.MESSAGE,
        validation_alias=AliasChoices("toolType", "uiToolType", "tool_type"),
        serialization_alias="toolType",
    )
    content: ComponentContent = Field(default_factory=ComponentContent)
    ai_generated: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def touch(self) -> None:
        self.updated_at = utc_now()

    def display_text(self) -> str:
        """Headline text the preview shows for this record."""
        content = self.content
        if self.tool_type == ToolType.BANNER:
            return (content.banner.text if content.banner else "") or "New banner"
        if self.tool_type == ToolType.QUESTION:
            return (content.question.text if content.question else "") or "New question"
        if self.tool_type == ToolType.MULTI_SELECT:
            text = content.multi_select.text if content.multi_select else ""
            return text or "New multi-select question"
        if self.tool_type == ToolType.FREE_CHAT and content.free_chat:
            return content.free_chat.text or "New component added"
        if self.tool_type == ToolType.ACCORDION and content.accordion:
            return content.accordion.title or "New component added"
        if self.tool_type == ToolType.INTRO and content.intro:
            return content.intro.text or "New component added"
        return (content.message.text if content.message else "") or "New component added"


class Node(CamelModel):
    """
    A placed unit in the flow graph.

    `id` is internal to the graph; `legacy_id` is the handle the preview and
    editor surfaces use and is never interpreted by the core.
    """
    id: str
    position: Position = Field(default_factory=Position)
    content_id: str
    legacy_id: str
    show_dropdown: bool = False

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=False,
    )

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Node):
            return self.id == other.id
        return False


class Edge(CamelModel):
    """Directed playback transition between two nodes."""
    id: str
    source_id: str = Field(
        validation_alias=AliasChoices("sourceId", "source", "source_id"),
        serialization_alias="sourceId",
    )
    target_id: str = Field(
        validation_alias=AliasChoices("targetId", "target", "target_id"),
        serialization_alias="targetId",
    )


class LinearOrder(CamelModel):
    """
    Derived playback order over a graph snapshot.

    `order` holds the default traversal followed by the unvisited appendix.
    `excluded_ids` are alternate-branch nodes skipped because they rejoin the
    main line at a convergence point. `order` and `excluded_ids` together
    cover every node exactly once.
    """
    order: List[str] = Field(default_factory=list)
    orphan_ids: List[str] = Field(default_factory=list)
    excluded_ids: List[str] = Field(default_factory=list)

    @property
    def playback_ids(self) -> List[str]:
        return self.order + self.excluded_ids

    def sync_payload(self) -> Dict[str, Any]:
        return {"order": list(self.order), "orphanIds": list(self.orphan_ids)}


class DeleteRequest(CamelModel):
    """Confirmation prompt raised by the delete key; never mutates on its own."""
    node_ids: List[str]
    legacy_ids: List[str]
    label: str
