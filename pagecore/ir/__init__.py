"""Intermediate Representation (IR) models for pages."""

from pagecore.ir.lib import (
    DEFAULT_VERSION,
    EFFECT_TARGET_TYPES,
    EFFECT_TYPES,
    NODE_CATEGORIES,
    NODE_TYPES,
    ROOT_PATH,
    STYLE_TOKEN_KEYS,
    AlignToken,
    AppendStateArrayEffect,
    BorderSpec,
    BorderStyle,
    ColorRole,
    Condition,
    ConditionOp,
    CoreDocument,
    CoreNode,
    DocumentAssets,
    DocumentError,
    Effect,
    EmitEffect,
    EventBinding,
    FetchJsonEffect,
    FocusEffect,
    FontWeight,
    IRModel,
    KeyframesMotion,
    LayoutToken,
    MotionPresetName,
    MotionSpec,
    MotionTrigger,
    NodeCategory,
    NodeType,
    Overflow,
    PositionMode,
    PresetMotion,
    RadiusToken,
    RunAnimationEffect,
    ScriptModule,
    SetStateEffect,
    ShadowToken,
    SpaceSides,
    SpaceToken,
    StyleTokens,
    TextAlign,
    ToastEffect,
    ToggleTargetEffect,
    TypographyToken,
    dump_document,
    find_node,
    get_node_category,
    get_types_by_category,
    is_new_build,
    iter_ids,
    load_document,
    new_document,
    to_wire,
    walk,
)

__all__ = [
    # Core models
    "IRModel",
    "CoreNode",
    "CoreDocument",
    "ScriptModule",
    "DocumentAssets",
    "DocumentError",
    "DEFAULT_VERSION",
    "ROOT_PATH",
    # Node types
    "NodeType",
    "NODE_TYPES",
    "NodeCategory",
    "NODE_CATEGORIES",
    "get_node_category",
    "get_types_by_category",
    # Style tokens
    "StyleTokens",
    "STYLE_TOKEN_KEYS",
    "SpaceToken",
    "SpaceSides",
    "RadiusToken",
    "ShadowToken",
    "ColorRole",
    "TypographyToken",
    "LayoutToken",
    "AlignToken",
    "Overflow",
    "FontWeight",
    "TextAlign",
    "PositionMode",
    "BorderStyle",
    "BorderSpec",
    # Interaction
    "Condition",
    "ConditionOp",
    "Effect",
    "EFFECT_TYPES",
    "EFFECT_TARGET_TYPES",
    "ToggleTargetEffect",
    "SetStateEffect",
    "AppendStateArrayEffect",
    "FetchJsonEffect",
    "EmitEffect",
    "RunAnimationEffect",
    "FocusEffect",
    "ToastEffect",
    "EventBinding",
    # Motion
    "MotionSpec",
    "MotionTrigger",
    "MotionPresetName",
    "PresetMotion",
    "KeyframesMotion",
    # Helpers
    "to_wire",
    "walk",
    "iter_ids",
    "find_node",
    "new_document",
    "is_new_build",
    "load_document",
    "dump_document",
]
