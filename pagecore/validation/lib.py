"""Document validation and static analysis.

This module checks CoreDocument trees for problems the type system cannot
catch: duplicated ids, unknown node types, dangling effect targets and
suspicious script modules. Results are diagnostics, never exceptions, so a
caller can decide whether warnings or errors block a change.
"""

import re
from dataclasses import dataclass
from enum import Enum

from pagecore.ir import (
    EFFECT_TARGET_TYPES,
    NODE_TYPES,
    CoreDocument,
    MotionPresetName,
    NodeType,
    walk,
)


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """A problem found in a document.

    Attributes:
        severity: ERROR blocks a change in strict mode, WARNING never does.
        path: Location such as ``app.children[0].events[1].do[0].target``.
        message: Human-readable description.
        code: Machine-readable category (e.g. "duplicate_id").
    """

    severity: Severity
    path: str
    message: str
    code: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.path}: {self.message}"


# Patterns in module sources that deserve a second look
DENY_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\beval\s*\("), "eval()"),
    (re.compile(r"\bnew\s+Function\s*\("), "new Function()"),
    (re.compile(r"\bimport\s*\("), "dynamic import()"),
)

_PRESET_NAMES = frozenset(p.value for p in MotionPresetName)


def validate_document(document: CoreDocument) -> list[Diagnostic]:
    """Validate a document for structural and referential issues.

    Performs the following checks:
        - Unique id enforcement (one error per duplicated id)
        - Node types belong to the vocabulary
        - Event bindings name an event and run at least one effect
        - Effect targets resolve to node ids
        - Script modules have unique ids and avoid eval-like constructs
        - Style keys belong to the token vocabulary (warning)
        - The root is an App node (warning)
        - onState motion names a state key (warning)
        - runAnimation names a known preset (warning)

    Args:
        document: The document to validate. Never mutated.

    Returns:
        list[Diagnostic]: Diagnostics in document order (empty if clean).

    Example:
        >>> for d in validate_document(doc):
        ...     print(d)
    """
    diagnostics: list[Diagnostic] = []

    if document.app.type != NodeType.APP.value:
        diagnostics.append(
            Diagnostic(
                Severity.WARNING,
                "app.type",
                f'Root node should be of type "App", got "{document.app.type}"',
                "root_not_app",
            )
        )

    id_counts: dict[str, int] = {}
    first_repeat: dict[str, str] = {}
    targets: list[tuple[str, str]] = []

    for node, path in walk(document.app):
        id_counts[node.id] = id_counts.get(node.id, 0) + 1
        if id_counts[node.id] == 2:
            first_repeat[node.id] = path

        if node.type not in NODE_TYPES:
            diagnostics.append(
                Diagnostic(
                    Severity.ERROR,
                    f"{path}.type",
                    f'Unknown node type: "{node.type}"',
                    "unknown_type",
                )
            )

        if node.style is not None:
            for key in node.style.unknown_keys:
                diagnostics.append(
                    Diagnostic(
                        Severity.WARNING,
                        f"{path}.style.{key}",
                        f'Unknown style token "{key}" is ignored by the compiler',
                        "unknown_style_key",
                    )
                )

        for i, binding in enumerate(node.events or []):
            event_path = f"{path}.events[{i}]"
            if not binding.event:
                diagnostics.append(
                    Diagnostic(
                        Severity.ERROR,
                        f"{event_path}.event",
                        "Event binding is missing an event name",
                        "missing_event",
                    )
                )
            if not binding.effects:
                diagnostics.append(
                    Diagnostic(
                        Severity.WARNING,
                        f"{event_path}.do",
                        "Event binding has no effects",
                        "empty_effects",
                    )
                )
            for j, effect in enumerate(binding.effects):
                effect_path = f"{event_path}.do[{j}]"
                target = getattr(effect, "target", None)
                if effect.type in EFFECT_TARGET_TYPES and target:
                    targets.append((f"{effect_path}.target", target))
                if effect.type == "runAnimation" and effect.animation not in _PRESET_NAMES:
                    diagnostics.append(
                        Diagnostic(
                            Severity.WARNING,
                            f"{effect_path}.animation",
                            f'Unknown animation preset "{effect.animation}"',
                            "unknown_animation",
                        )
                    )

        motion = node.motion
        if motion is not None and motion.trigger == "onState" and not motion.state_key:
            diagnostics.append(
                Diagnostic(
                    Severity.WARNING,
                    f"{path}.motion.stateKey",
                    "onState motion needs a stateKey to watch",
                    "missing_state_key",
                )
            )

    for node_id, count in id_counts.items():
        if count > 1:
            diagnostics.append(
                Diagnostic(
                    Severity.ERROR,
                    first_repeat[node_id],
                    f'Duplicate node ID: "{node_id}" appears {count} times',
                    "duplicate_id",
                )
            )

    for target_path, target in targets:
        if target not in id_counts:
            diagnostics.append(
                Diagnostic(
                    Severity.ERROR,
                    target_path,
                    f'Target "{target}" does not match any node ID',
                    "unresolved_target",
                )
            )

    diagnostics.extend(_validate_modules(document))
    return diagnostics


def _validate_modules(document: CoreDocument) -> list[Diagnostic]:
    """Check script modules for duplicate ids and eval-like constructs.

    Args:
        document: Document whose modules are checked.

    Returns:
        list[Diagnostic]: Module diagnostics found.
    """
    diagnostics: list[Diagnostic] = []
    seen: set[str] = set()

    for i, module in enumerate(document.modules or []):
        if module.id in seen:
            diagnostics.append(
                Diagnostic(
                    Severity.ERROR,
                    f"modules[{i}].id",
                    f'Duplicate module ID: "{module.id}"',
                    "duplicate_module",
                )
            )
        seen.add(module.id)

        for pattern, label in DENY_PATTERNS:
            if pattern.search(module.source):
                diagnostics.append(
                    Diagnostic(
                        Severity.WARNING,
                        f"modules[{i}].source",
                        f'Module "{module.id}" uses {label}',
                        "unsafe_module_source",
                    )
                )

    return diagnostics


def errors_only(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    return [d for d in diagnostics if d.is_error]


def has_errors(diagnostics: list[Diagnostic]) -> bool:
    """True if any diagnostic is an error."""
    return any(d.is_error for d in diagnostics)


def is_valid(document: CoreDocument) -> bool:
    """Check if a document has no error diagnostics.

    Warnings do not make a document invalid.

    Example:
        >>> if is_valid(doc):
        ...     html = compile_document(doc)
    """
    return not has_errors(validate_document(document))
