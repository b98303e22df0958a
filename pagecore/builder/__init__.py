"""Builder contract and page transform."""

from pagecore.builder.lib import (
    CURRENT_PAGE_TITLE,
    USER_MESSAGE_TITLE,
    Builder,
    BuilderError,
    BuilderResult,
    BuildRequest,
    CompleteFn,
    CompletionBuilder,
    CompletionRequest,
    ContextSection,
    ErrorResult,
    OpsResult,
    ReplyResult,
    TransformResult,
    ValidationFailedError,
    build_user_prompt,
    get_core_instructions,
    parse_ops_response,
    transform_core_page,
)

__all__ = [
    # Contract
    "Builder",
    "BuildRequest",
    "ContextSection",
    "BuilderResult",
    "OpsResult",
    "ReplyResult",
    "ErrorResult",
    # Completion-backed builder
    "CompleteFn",
    "CompletionBuilder",
    "CompletionRequest",
    "get_core_instructions",
    "build_user_prompt",
    "parse_ops_response",
    "CURRENT_PAGE_TITLE",
    "USER_MESSAGE_TITLE",
    # Transform
    "transform_core_page",
    "TransformResult",
    # Errors
    "BuilderError",
    "ValidationFailedError",
]
