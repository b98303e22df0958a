"""Builder contract and page transform orchestration.

A builder turns a serialized document plus a user message into either a
batch of ops, a plain-text reply, or an error. ``CompletionBuilder`` adapts
any awaited text-completion callable to that contract, and
``transform_core_page`` drives one edit round trip:

    1. Serialize the document as the current-page context section
    2. Ask the builder for ops
    3. Apply the ops to a copy of the document
    4. Validate the result and log error diagnostics
    5. Return the edited document with its diagnostics

Example:
    >>> async def complete(request: CompletionRequest) -> str:
    ...     return await my_model(request.system, request.prompt)
    >>> builder = CompletionBuilder(complete)
    >>> result = await transform_core_page(doc, "Add a footer", builder)
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from pagecore.config import get_product_name, get_strict_validation
from pagecore.ir import CoreDocument, dump_document, is_new_build, load_document
from pagecore.ops import apply_core_ops
from pagecore.schema import export_llm_schema, export_ops_schema, hydrate_core_ops
from pagecore.validation import Diagnostic, errors_only, validate_document

logger = logging.getLogger(__name__)

CURRENT_PAGE_TITLE = "<CURRENT_PAGE>"
USER_MESSAGE_TITLE = "<USER_MESSAGE>"


# =============================================================================
# Errors
# =============================================================================


class BuilderError(Exception):
    """The builder could not produce a result."""


class ValidationFailedError(ValueError):
    """Strict mode found error diagnostics in the edited document.

    Attributes:
        diagnostics: The error diagnostics that caused the failure.
    """

    def __init__(self, diagnostics: list[Diagnostic]):
        self.diagnostics = diagnostics
        summary = "; ".join(str(d) for d in diagnostics[:5])
        more = f" (+{len(diagnostics) - 5} more)" if len(diagnostics) > 5 else ""
        super().__init__(f"{len(diagnostics)} validation error(s): {summary}{more}")


# =============================================================================
# Contract types
# =============================================================================


@dataclass
class ContextSection:
    """A titled block of context passed to the builder.

    Attributes:
        title: Section title, e.g. "<CURRENT_PAGE>".
        content: The section body.
        instructions: How the model should use this section.
    """

    title: str
    content: str
    instructions: str = ""


@dataclass
class BuildRequest:
    """Everything a builder needs for one edit.

    Attributes:
        document_json: The current document as wire JSON.
        message: The user's instruction.
        new_build: True when the document has no content yet.
        sections: Extra context sections, in prompt order.
    """

    document_json: str
    message: str
    new_build: bool = False
    sections: list[ContextSection] = field(default_factory=list)


@dataclass
class CompletionRequest:
    """A single prompt for a text-completion backend.

    Attributes:
        system: System instructions.
        prompt: User prompt with all context sections.
        json_schema: Optional response schema for structured output.
    """

    system: str
    prompt: str
    json_schema: dict[str, Any] | None = None


@dataclass
class OpsResult:
    """The builder proposed ops (hydrated wire dicts)."""

    ops: list[Any]


@dataclass
class ReplyResult:
    """The builder answered in prose instead of editing."""

    text: str


@dataclass
class ErrorResult:
    """The builder failed."""

    error: Exception


BuilderResult = Union[OpsResult, ReplyResult, ErrorResult]

CompleteFn = Callable[[CompletionRequest], Awaitable[str]]


class Builder(ABC):
    """Abstract base class for page builders.

    Implementations must be safe to call concurrently for independent
    documents. Retry and timeout policy belong to the implementation.
    """

    @abstractmethod
    async def run(self, request: BuildRequest) -> BuilderResult:
        """Produce ops, a reply or an error for ``request``."""
        ...


# =============================================================================
# Prompting
# =============================================================================


_INSTRUCTIONS_TEMPLATE = """You are {product_name}, a page builder that edits pages through structured operations.

Pages are JSON documents: a tree of typed nodes rooted at an App node. You never write HTML.
You return a JSON array of operations that edit the current document.

NODE TYPES (by category):
{node_types}

STYLE TOKENS (use these instead of CSS; width, height, min/max sizes and fontSize take CSS strings):
{tokens}

EVENTS:
Each node may carry "events": [{{"event": "click"|"submit"|"input"|"change"|"focus"|"blur"|"hover", "when": [conditions], "do": [effects]}}]
Condition ops: {condition_ops}
Effects: {effects}
Effects with a "target" must name an existing node id.

MOTION:
A node may carry one "motion" spec: {{"mode": "preset", "preset": ...}} or {{"mode": "keyframes", "keyframes": [...]}}.
Presets: {presets}
Triggers: {triggers} (onState also needs "stateKey")

OPERATIONS:
- updateProps / updateStyle: merge into the node's props or style
- updateText: set the node's text
- replace: swap the node for a new subtree
- delete: remove the node
- insert: "prepend"/"append" add to parentId's children; "before"/"after" place next to the node named by parentId
- addEvent / removeEvent: append a binding, or remove one by eventIndex
- updateAnimation: set or clear the node's motion
Fields named props, style, event, events and motion are JSON-encoded strings.

RULES:
1. Every node has a unique "id" and a "type" from the list above
2. Keep existing ids stable; pick new, descriptive ids for new nodes
3. Prefer the most targeted op (updateText/updateStyle/updateProps over replace)
4. Initial runtime state lives in the App node's props.state
5. For a new build, insert the page content into the App node ("app")

EXAMPLE:
{example}

Return ONLY the JSON array of operations. If the user asks a question instead of requesting a change, answer in plain text without any JSON array."""


def get_core_instructions(product_name: str | None = None) -> str:
    """Build the system prompt teaching the op vocabulary.

    Args:
        product_name: Name the builder introduces itself as. Defaults to
            ``PAGECORE_PRODUCT_NAME``.

    Returns:
        str: System prompt text.
    """
    vocab = export_llm_schema()
    node_types = "\n".join(
        f"- {category}: {', '.join(types)}" for category, types in vocab["node_types"].items()
    )
    tokens = "\n".join(f"- {name}: {', '.join(values)}" for name, values in vocab["tokens"].items())
    return _INSTRUCTIONS_TEMPLATE.format(
        product_name=get_product_name(product_name),
        node_types=node_types,
        tokens=tokens,
        condition_ops=", ".join(vocab["condition_ops"]),
        effects=", ".join(vocab["effects"]),
        presets=", ".join(vocab["motion"]["presets"]),
        triggers=", ".join(vocab["motion"]["triggers"]),
        example=json.dumps(vocab["examples"], indent=2),
    )


def _format_section(section: ContextSection) -> str:
    parts = [section.title, section.content]
    if section.instructions:
        parts.append(section.instructions)
    return "\n".join(parts)


def build_user_prompt(request: BuildRequest) -> str:
    """Assemble the user prompt: current page, extra sections, then the message."""
    current = ContextSection(
        title=CURRENT_PAGE_TITLE,
        content=request.document_json,
        instructions=(
            "The page is empty. Build it by inserting content into the App node."
            if request.new_build
            else "Edit this page. Address nodes by their ids."
        ),
    )
    sections = [current, *request.sections]
    blocks = [_format_section(s) for s in sections]
    blocks.append(f"{USER_MESSAGE_TITLE}\n{request.message}")
    return "\n\n".join(blocks)


def _looks_like_ops(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(item, dict) and "op" in item for item in value
    )


def parse_ops_response(text: str) -> BuilderResult:
    """Interpret a completion as ops or a reply.

    The outermost ``[`` ... ``]`` span is parsed as the op array and hydrated.
    Text without a parseable array, or whose array holds anything other than
    op objects (e.g. "levels [1, 2, 3]"), is a reply.

    Args:
        text: Raw completion text, possibly fenced or with prose around it.

    Returns:
        OpsResult with hydrated ops, or ReplyResult with the stripped text.
    """
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return ReplyResult(text.strip())

    try:
        raw = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Response contains brackets but no JSON array (%s); treating as reply", e)
        return ReplyResult(text.strip())

    if not _looks_like_ops(raw):
        logger.debug("Bracketed JSON in response is not an op array; treating as reply")
        return ReplyResult(text.strip())

    return OpsResult(hydrate_core_ops(raw))


class CompletionBuilder(Builder):
    """Builder backed by an awaited text-completion callable.

    The callable receives a CompletionRequest and returns the model's text.
    Whatever it raises is reported as an ErrorResult; this class adds no
    retries or timeouts.

    Example:
        >>> builder = CompletionBuilder(complete, product_name="Acme Pages")
        >>> result = await builder.run(request)
    """

    def __init__(
        self,
        complete: CompleteFn,
        product_name: str | None = None,
        *,
        structured_output: bool = False,
    ):
        """Initialize CompletionBuilder.

        Args:
            complete: Async completion callable.
            product_name: Name used in the system prompt.
            structured_output: Attach the ops JSON schema to each request.
        """
        self._complete = complete
        self._system = get_core_instructions(product_name)
        self._structured_output = structured_output

    @property
    def system_prompt(self) -> str:
        return self._system

    def build_request(self, request: BuildRequest) -> CompletionRequest:
        return CompletionRequest(
            system=self._system,
            prompt=build_user_prompt(request),
            json_schema=export_ops_schema() if self._structured_output else None,
        )

    async def run(self, request: BuildRequest) -> BuilderResult:
        completion = self.build_request(request)
        try:
            text = await self._complete(completion)
        except Exception as e:
            logger.error("Completion failed: %s", e)
            return ErrorResult(e)

        if not isinstance(text, str):
            return ErrorResult(TypeError(f"Completion returned {type(text).__name__}, expected str"))
        return parse_ops_response(text)


# =============================================================================
# Transform
# =============================================================================


@dataclass
class TransformResult:
    """Outcome of one transform round trip.

    Attributes:
        document: The edited document (the input document for replies).
        change_count: Number of ops the builder returned.
        diagnostics: Validator findings for the edited document.
        reply: The builder's prose answer, when it did not edit.
    """

    document: CoreDocument
    change_count: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)
    reply: str | None = None

    @property
    def changed(self) -> bool:
        return self.change_count > 0


async def transform_core_page(
    document: CoreDocument | dict[str, Any] | str,
    message: str,
    builder: Builder,
    *,
    sections: Sequence[ContextSection] = (),
    strict: bool | None = None,
) -> TransformResult:
    """Run one builder edit against a document.

    Args:
        document: Document model or its wire form.
        message: The user's instruction.
        builder: Builder producing the ops.
        sections: Extra context sections for the prompt.
        strict: Raise on error diagnostics. Defaults to
            ``PAGECORE_STRICT_VALIDATION``.

    Returns:
        TransformResult: Edited document with diagnostics, or the unchanged
        document with the builder's reply.

    Raises:
        DocumentError: If ``document`` cannot be loaded.
        BuilderError: If the builder reported a failure.
        ValidationFailedError: In strict mode, if the edited document has
            error diagnostics.
    """
    doc = load_document(document)
    request = BuildRequest(
        document_json=dump_document(doc),
        message=message,
        new_build=is_new_build(doc),
        sections=list(sections),
    )

    result = await builder.run(request)

    if isinstance(result, ErrorResult):
        raise BuilderError(f"Builder failed: {result.error}") from result.error
    if isinstance(result, ReplyResult):
        return TransformResult(document=doc, reply=result.text)
    if not isinstance(result, OpsResult):
        raise BuilderError(f"Unsupported builder result: {type(result).__name__}")

    updated = apply_core_ops(doc, result.ops)
    diagnostics = validate_document(updated)
    errors = errors_only(diagnostics)
    if errors:
        logger.warning(
            "Validation errors after applying %d op(s): %s",
            len(result.ops),
            "; ".join(str(d) for d in errors),
        )
        if get_strict_validation(strict):
            raise ValidationFailedError(errors)

    logger.info("Applied %d op(s) from builder", len(result.ops))
    return TransformResult(
        document=updated,
        change_count=len(result.ops),
        diagnostics=diagnostics,
    )
