"""Core IR models for page representation.

This module defines the Intermediate Representation (IR) that serves as the
contract between LLM-produced edits and the compiler. A page is a tree of
typed nodes carrying semantic style tokens, declarative event bindings and
motion specs. Models serialize to a camelCase JSON wire form which is what
the builder sees and what the client runtime parses.
"""

import json
from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

DEFAULT_VERSION = "1.0"
ROOT_PATH = "app"


class DocumentError(ValueError):
    """Raised when a top-level input is not a well-formed document."""


class IRModel(BaseModel):
    """Base model for every IR structure.

    Fields are snake_case in Python and camelCase on the wire. Enum values
    are stored as plain strings so the wire form stays JSON-native.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


def to_wire(model: BaseModel) -> dict[str, Any]:
    """Serialize an IR model to its JSON wire form.

    Unset optional fields are omitted so a parsed document serializes back
    to the same shape it was read from.
    """
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# Node types
# =============================================================================


class NodeType(str, Enum):
    """The constrained UI primitives a page is built from."""

    # Layout
    APP = "App"
    PAGE = "Page"
    SECTION = "Section"
    BOX = "Box"
    STACK = "Stack"
    GRID = "Grid"
    CLUSTER = "Cluster"
    SPACER = "Spacer"
    DIVIDER = "Divider"

    # Typography
    HEADING = "Heading"
    TEXT = "Text"
    RICH_TEXT = "RichText"

    # Media
    IMAGE = "Image"
    ICON = "Icon"

    # Interactive
    BUTTON = "Button"
    LINK = "Link"

    # Forms
    FORM = "Form"
    INPUT = "Input"
    SELECT = "Select"
    CHECKBOX = "Checkbox"

    # Containers
    CARD = "Card"
    LIST = "List"
    TABLE = "Table"

    # Feedback
    BADGE = "Badge"
    TOAST_REGION = "ToastRegion"

    # Disclosure
    DISCLOSURE = "Disclosure"
    TABS = "Tabs"
    DIALOG = "Dialog"

    # Animation
    ANIMATE = "Animate"


NODE_TYPES: frozenset[str] = frozenset(nt.value for nt in NodeType)


class NodeCategory(str, Enum):
    """High-level node groupings for prompts and analysis."""

    LAYOUT = "layout"
    TYPOGRAPHY = "typography"
    MEDIA = "media"
    INTERACTIVE = "interactive"
    FORM = "form"
    CONTAINER = "container"
    FEEDBACK = "feedback"
    DISCLOSURE = "disclosure"
    ANIMATION = "animation"


NODE_CATEGORIES: dict[NodeType, NodeCategory] = {
    NodeType.APP: NodeCategory.LAYOUT,
    NodeType.PAGE: NodeCategory.LAYOUT,
    NodeType.SECTION: NodeCategory.LAYOUT,
    NodeType.BOX: NodeCategory.LAYOUT,
    NodeType.STACK: NodeCategory.LAYOUT,
    NodeType.GRID: NodeCategory.LAYOUT,
    NodeType.CLUSTER: NodeCategory.LAYOUT,
    NodeType.SPACER: NodeCategory.LAYOUT,
    NodeType.DIVIDER: NodeCategory.LAYOUT,
    NodeType.HEADING: NodeCategory.TYPOGRAPHY,
    NodeType.TEXT: NodeCategory.TYPOGRAPHY,
    NodeType.RICH_TEXT: NodeCategory.TYPOGRAPHY,
    NodeType.IMAGE: NodeCategory.MEDIA,
    NodeType.ICON: NodeCategory.MEDIA,
    NodeType.BUTTON: NodeCategory.INTERACTIVE,
    NodeType.LINK: NodeCategory.INTERACTIVE,
    NodeType.FORM: NodeCategory.FORM,
    NodeType.INPUT: NodeCategory.FORM,
    NodeType.SELECT: NodeCategory.FORM,
    NodeType.CHECKBOX: NodeCategory.FORM,
    NodeType.CARD: NodeCategory.CONTAINER,
    NodeType.LIST: NodeCategory.CONTAINER,
    NodeType.TABLE: NodeCategory.CONTAINER,
    NodeType.BADGE: NodeCategory.FEEDBACK,
    NodeType.TOAST_REGION: NodeCategory.FEEDBACK,
    NodeType.DISCLOSURE: NodeCategory.DISCLOSURE,
    NodeType.TABS: NodeCategory.DISCLOSURE,
    NodeType.DIALOG: NodeCategory.DISCLOSURE,
    NodeType.ANIMATE: NodeCategory.ANIMATION,
}


def get_node_category(node_type: NodeType | str) -> NodeCategory:
    """Get the category for a node type.

    Args:
        node_type: The node type to categorize.

    Returns:
        NodeCategory: The category this node type belongs to.

    Raises:
        ValueError: If the type is not a known NodeType.
    """
    return NODE_CATEGORIES[NodeType(node_type)]


def get_types_by_category(category: NodeCategory) -> list[NodeType]:
    """List node types belonging to a category, in declaration order."""
    return [nt for nt, cat in NODE_CATEGORIES.items() if cat == category]


# =============================================================================
# Style tokens
# =============================================================================


class SpaceToken(str, Enum):
    """Spacing scale used for padding and gaps."""

    NONE = "none"
    XS = "xs"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"
    XXL = "2xl"
    XXXL = "3xl"


class RadiusToken(str, Enum):
    """Corner radius scale."""

    NONE = "none"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"
    FULL = "full"


class ShadowToken(str, Enum):
    """Elevation scale."""

    NONE = "none"
    SM = "sm"
    MD = "md"
    LG = "lg"
    XL = "xl"


class ColorRole(str, Enum):
    """Semantic color roles resolved by the active adapter's theme."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    INFO = "info"
    NEUTRAL = "neutral"
    SURFACE = "surface"
    BACKGROUND = "background"
    TEXT = "text"
    TEXT_SECONDARY = "textSecondary"
    BORDER = "border"
    MUTED = "muted"


class TypographyToken(str, Enum):
    """Typography roles, largest to smallest, plus code."""

    DISPLAY = "display"
    HEADLINE = "headline"
    TITLE = "title"
    SUBTITLE = "subtitle"
    BODY = "body"
    CAPTION = "caption"
    OVERLINE = "overline"
    CODE = "code"


class LayoutToken(str, Enum):
    """Display mode of a node."""

    BLOCK = "block"
    INLINE = "inline"
    FLEX = "flex"
    GRID = "grid"
    HIDDEN = "hidden"


class AlignToken(str, Enum):
    """Alignment and distribution along either axis."""

    START = "start"
    CENTER = "center"
    END = "end"
    STRETCH = "stretch"
    BETWEEN = "between"
    AROUND = "around"
    EVENLY = "evenly"


class Overflow(str, Enum):
    AUTO = "auto"
    HIDDEN = "hidden"
    SCROLL = "scroll"
    VISIBLE = "visible"


class FontWeight(str, Enum):
    NORMAL = "normal"
    MEDIUM = "medium"
    SEMIBOLD = "semibold"
    BOLD = "bold"


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class PositionMode(str, Enum):
    STATIC = "static"
    RELATIVE = "relative"
    ABSOLUTE = "absolute"
    FIXED = "fixed"
    STICKY = "sticky"


class BorderStyle(str, Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"
    NONE = "none"


class SpaceSides(IRModel):
    """Per-axis or per-edge spacing. Edge values win over axis values."""

    x: SpaceToken | None = None
    y: SpaceToken | None = None
    top: SpaceToken | None = None
    right: SpaceToken | None = None
    bottom: SpaceToken | None = None
    left: SpaceToken | None = None


class BorderSpec(IRModel):
    width: int | float | None = None
    style: BorderStyle | None = None
    color: ColorRole | None = None


class StyleTokens(IRModel):
    """Semantic style tokens, the only sanctioned styling vocabulary.

    Token fields take closed enumerations. Free-form CSS values are limited
    to the length escape fields (width, height, min/max sizes, font_size)
    and cursor. Unknown keys are kept on the model so the validator can
    report them; adapters never resolve them.
    """

    model_config = ConfigDict(extra="allow")

    space: SpaceToken | SpaceSides | None = None
    radius: RadiusToken | None = None
    border: BorderSpec | None = None
    shadow: ShadowToken | None = None
    color: ColorRole | None = None
    bg: ColorRole | None = None
    typography: TypographyToken | None = None
    layout: LayoutToken | None = None
    align: AlignToken | None = None
    justify: AlignToken | None = None
    gap: SpaceToken | None = None
    width: str | None = None
    height: str | None = None
    min_width: str | None = None
    max_width: str | None = None
    min_height: str | None = None
    max_height: str | None = None
    overflow: Overflow | None = None
    opacity: Annotated[float, Field(ge=0, le=1)] | None = None
    font_weight: FontWeight | None = None
    font_size: str | None = None
    text_align: TextAlign | None = None
    cursor: str | None = None
    position: PositionMode | None = None

    @property
    def unknown_keys(self) -> list[str]:
        """Keys that are not part of the token vocabulary."""
        return sorted((self.model_extra or {}).keys())


STYLE_TOKEN_KEYS: frozenset[str] = frozenset(
    field.alias or name for name, field in StyleTokens.model_fields.items()
)


# =============================================================================
# Conditions, effects, event bindings
# =============================================================================


class ConditionOp(str, Enum):
    """Comparison operators for event conditions."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    TRUTHY = "truthy"
    FALSY = "falsy"
    CONTAINS = "contains"


class Condition(IRModel):
    """A predicate over a runtime state key."""

    key: str
    op: ConditionOp
    value: Any = None


class ToggleTargetEffect(IRModel):
    """Toggle the visibility of a target node."""

    type: Literal["toggleTarget"] = "toggleTarget"
    target: str


class SetStateEffect(IRModel):
    type: Literal["setState"] = "setState"
    key: str
    value: Any = None


class AppendStateArrayEffect(IRModel):
    """Append a value to the array stored under a state key."""

    type: Literal["appendStateArray"] = "appendStateArray"
    key: str
    value: Any = None


class FetchJsonEffect(IRModel):
    """Request a URL at interaction time and store the decoded result."""

    type: Literal["fetchJson"] = "fetchJson"
    url: str
    method: Literal["GET", "POST", "PUT", "DELETE"] | None = None
    body: Any = None
    result_key: str | None = None


class EmitEffect(IRModel):
    """Dispatch a custom DOM event carrying the triggering element."""

    type: Literal["emit"] = "emit"
    event: str | None = None


class RunAnimationEffect(IRModel):
    """Play a motion preset on a target (or on the triggering element)."""

    type: Literal["runAnimation"] = "runAnimation"
    animation: str
    target: str | None = None


class FocusEffect(IRModel):
    type: Literal["focus"] = "focus"
    target: str | None = None
    selector: str | None = None


class ToastEffect(IRModel):
    """Show a transient message in the page's toast region."""

    type: Literal["toast"] = "toast"
    message: str
    variant: Literal["info", "success", "warning", "danger"] | None = None


Effect = Annotated[
    Union[
        ToggleTargetEffect,
        SetStateEffect,
        AppendStateArrayEffect,
        FetchJsonEffect,
        EmitEffect,
        RunAnimationEffect,
        FocusEffect,
        ToastEffect,
    ],
    Field(discriminator="type"),
]

EFFECT_TYPES: tuple[str, ...] = (
    "toggleTarget",
    "setState",
    "appendStateArray",
    "fetchJson",
    "emit",
    "runAnimation",
    "focus",
    "toast",
)

# Effects whose ``target`` names a node id
EFFECT_TARGET_TYPES: frozenset[str] = frozenset(
    {"toggleTarget", "runAnimation", "focus"}
)


class EventBinding(IRModel):
    """On ``event``, if every condition in ``when`` holds, run ``do`` in order.

    Attributes:
        event: DOM event name ("click", "submit", "input", "change",
            "focus", "blur") or "hover".
        when: Conditions, AND-combined. Absent or empty means always.
        effects: Effects to run, serialized under the ``do`` key.
    """

    event: str = ""
    when: list[Condition] | None = None
    effects: list[Effect] = Field(default_factory=list, alias="do")


# =============================================================================
# Motion
# =============================================================================


class MotionTrigger(str, Enum):
    ON_MOUNT = "onMount"
    ON_VISIBLE = "onVisible"
    ON_HOVER = "onHover"
    ON_PRESS = "onPress"
    ON_STATE = "onState"


class MotionPresetName(str, Enum):
    """Canned animations the compiler can emit keyframes for."""

    FADE_IN = "fadeIn"
    FADE_OUT = "fadeOut"
    SLIDE_UP = "slideUp"
    SLIDE_DOWN = "slideDown"
    SLIDE_LEFT = "slideLeft"
    SLIDE_RIGHT = "slideRight"
    SCALE_IN = "scaleIn"
    SCALE_OUT = "scaleOut"
    BOUNCE = "bounce"
    SHAKE = "shake"
    PULSE = "pulse"
    SPIN = "spin"


class PresetMotion(IRModel):
    """A named canned animation. Durations and delays are milliseconds."""

    mode: Literal["preset"] = "preset"
    preset: MotionPresetName
    duration: int | float | None = None
    delay: int | float | None = None
    easing: str | None = None
    trigger: MotionTrigger | None = None
    state_key: str | None = None


class KeyframesMotion(IRModel):
    """An explicit keyframe list, played with the Web Animations API."""

    mode: Literal["keyframes"] = "keyframes"
    keyframes: list[dict[str, Any]]
    duration: int | float | None = None
    delay: int | float | None = None
    easing: str | None = None
    iterations: int | float | Literal["infinite"] | None = None
    fill: Literal["forwards", "backwards", "both", "none"] | None = None
    trigger: MotionTrigger | None = None
    state_key: str | None = None


MotionSpec = Annotated[
    Union[PresetMotion, KeyframesMotion],
    Field(discriminator="mode"),
]


# =============================================================================
# Nodes and documents
# =============================================================================


class CoreNode(IRModel):
    """Recursive node definition for the page tree.

    Attributes:
        id: Unique identifier within the whole document. The compiler and
            runtime key every cross-reference by id, never by position.
        type: Node type. Kept as a plain string so unknown types survive
            parsing and surface as validator diagnostics.
        props: Open bag of type-specific attributes.
        style: Semantic style tokens.
        events: Ordered event bindings.
        motion: At most one motion spec.
        children: Ordered child nodes; absent for leaves.
        text: Literal content for text-bearing nodes.

    Example:
        >>> node = CoreNode(id="cta", type=NodeType.BUTTON, text="Submit")
    """

    id: str = Field(..., description="Unique identifier within the document")
    type: str = Field(..., description="Node type from the NodeType vocabulary")
    props: dict[str, Any] | None = None
    style: StyleTokens | None = None
    events: list[EventBinding] | None = None
    motion: MotionSpec | None = None
    children: list["CoreNode"] | None = None
    text: str | None = None


class ScriptModule(IRModel):
    """Escape-hatch script for behaviour the IR cannot express."""

    id: str
    source: str


class DocumentAssets(IRModel):
    styles: list[str] | None = None
    scripts: list[str] | None = None


class CoreDocument(IRModel):
    """Top-level page wrapper.

    The root ``app`` node reserves three props: ``title``, ``lang`` and
    ``state`` (the initial runtime state bag).
    """

    version: str = DEFAULT_VERSION
    app: CoreNode
    assets: DocumentAssets | None = None
    modules: list[ScriptModule] | None = None

    @property
    def title(self) -> str | None:
        title = (self.app.props or {}).get("title")
        return None if title is None else str(title)

    @property
    def lang(self) -> str | None:
        lang = (self.app.props or {}).get("lang")
        return None if lang is None else str(lang)

    @property
    def initial_state(self) -> dict[str, Any]:
        state = (self.app.props or {}).get("state")
        return state if isinstance(state, dict) else {}


# =============================================================================
# Tree helpers
# =============================================================================


def walk(root: CoreNode, path: str = ROOT_PATH) -> Iterator[tuple[CoreNode, str]]:
    """Yield ``(node, path)`` pairs in pre-order.

    Paths look like ``app.children[0].children[2]``.
    """
    yield root, path
    for i, child in enumerate(root.children or []):
        yield from walk(child, f"{path}.children[{i}]")


def iter_ids(root: CoreNode) -> Iterator[str]:
    """Yield every node id in pre-order, duplicates included."""
    for node, _ in walk(root):
        yield node.id


def find_node(root: CoreNode, node_id: str) -> CoreNode | None:
    """Find the first node with ``node_id`` in pre-order, or None."""
    for node, _ in walk(root):
        if node.id == node_id:
            return node
    return None


# =============================================================================
# Construction and (de)serialization
# =============================================================================


def new_document(
    title: str | None = None,
    lang: str | None = None,
    state: dict[str, Any] | None = None,
    version: str = DEFAULT_VERSION,
) -> CoreDocument:
    """Create an empty "new build" document: an App root with no children."""
    props: dict[str, Any] = {}
    if title is not None:
        props["title"] = title
    if lang is not None:
        props["lang"] = lang
    if state:
        props["state"] = dict(state)
    app = CoreNode(id="app", type=NodeType.APP.value, props=props or None)
    return CoreDocument(version=version, app=app)


def is_new_build(document: CoreDocument) -> bool:
    """True when the App root has no children yet."""
    return not document.app.children


def load_document(data: "CoreDocument | dict[str, Any] | str | bytes") -> CoreDocument:
    """Coerce a document, dict or JSON text into a CoreDocument.

    Raises:
        DocumentError: If the input is not a well-formed document.
    """
    if isinstance(data, CoreDocument):
        return data
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DocumentError(f"Document is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DocumentError(
            f"Expected a document object, got {type(data).__name__}"
        )
    try:
        return CoreDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Malformed document: {e}") from e


def dump_document(document: CoreDocument, indent: int | None = 2) -> str:
    """Serialize a document to wire JSON."""
    return json.dumps(to_wire(document), indent=indent, ensure_ascii=False)
