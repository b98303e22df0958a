"""Unit tests for the builder contract and page transform."""

import json
import logging

import pytest

from pagecore.builder import (
    CURRENT_PAGE_TITLE,
    USER_MESSAGE_TITLE,
    Builder,
    BuilderError,
    BuildRequest,
    CompletionBuilder,
    ContextSection,
    ErrorResult,
    OpsResult,
    ReplyResult,
    ValidationFailedError,
    build_user_prompt,
    get_core_instructions,
    parse_ops_response,
    transform_core_page,
)
from pagecore.ir import NODE_TYPES, find_node, new_document, to_wire
from pagecore.schema import encode_core_ops


class _FixedBuilder(Builder):
    """Returns one canned result and records the request."""

    def __init__(self, result):
        self.result = result
        self.requests: list[BuildRequest] = []

    async def run(self, request):
        self.requests.append(request)
        return self.result


# =============================================================================
# Prompting
# =============================================================================


class TestInstructions:
    """Tests for the system prompt."""

    @pytest.mark.unit
    def test_product_name(self):
        """The prompt introduces the configured product."""
        assert get_core_instructions("Acme Pages").startswith("You are Acme Pages,")

    @pytest.mark.unit
    def test_lists_vocabulary(self):
        """Node types, ops and presets all appear."""
        text = get_core_instructions("X")
        for node_type in NODE_TYPES:
            assert node_type in text
        for op in ("updateProps", "insert", "removeEvent", "updateAnimation"):
            assert op in text
        assert "fadeIn" in text
        assert "onVisible" in text

    @pytest.mark.unit
    def test_user_prompt_order(self):
        """Current page first, extra sections next, message last."""
        request = BuildRequest(
            document_json='{"app": {}}',
            message="Make it blue",
            sections=[ContextSection("<BRAND>", "Blue and bold", "Follow the brand")],
        )
        prompt = build_user_prompt(request)
        assert prompt.index(CURRENT_PAGE_TITLE) < prompt.index("<BRAND>") < prompt.index(USER_MESSAGE_TITLE)
        assert prompt.endswith(f"{USER_MESSAGE_TITLE}\nMake it blue")
        assert "Follow the brand" in prompt

    @pytest.mark.unit
    def test_new_build_hint(self):
        """New builds are told to insert into the App node."""
        prompt = build_user_prompt(BuildRequest(document_json="{}", message="m", new_build=True))
        assert "The page is empty" in prompt


class TestParseOpsResponse:
    """Tests for parse_ops_response."""

    @pytest.mark.unit
    def test_fenced_array(self):
        """Arrays inside fences and prose are extracted and hydrated."""
        text = 'Here you go:\n```json\n[{"op": "updateStyle", "nodeId": "a", "style": "{\\"bg\\": \\"muted\\"}"}]\n```'
        result = parse_ops_response(text)
        assert isinstance(result, OpsResult)
        assert result.ops == [{"op": "updateStyle", "nodeId": "a", "style": {"bg": "muted"}}]

    @pytest.mark.unit
    def test_no_array_is_reply(self):
        """Text without an array is a reply."""
        result = parse_ops_response("  The button is blue.  ")
        assert result == ReplyResult("The button is blue.")

    @pytest.mark.unit
    def test_unparseable_brackets_are_reply(self, caplog):
        """Bracketed prose that is not JSON is a reply, with a warning."""
        with caplog.at_level(logging.WARNING, logger="pagecore.builder.lib"):
            result = parse_ops_response("Use [primary] for the CTA")
        assert isinstance(result, ReplyResult)
        assert "treating as reply" in caplog.text

    @pytest.mark.unit
    def test_empty_array(self):
        """An empty array is an empty op batch."""
        assert parse_ops_response("[]") == OpsResult([])

    @pytest.mark.unit
    def test_numeric_array_is_reply(self):
        """Prose quoting a list of numbers is a reply, not an op batch."""
        text = "Headings support levels [1, 2, 3, 4, 5, 6]; no change needed."
        assert parse_ops_response(text) == ReplyResult(text)

    @pytest.mark.unit
    def test_array_without_op_keys_is_reply(self):
        """Objects must carry an op tag to count as ops."""
        text = 'Use one of [{"variant": "primary"}, {"op": "delete", "nodeId": "a"}]'
        assert isinstance(parse_ops_response(text), ReplyResult)


class TestCompletionBuilder:
    """Tests for CompletionBuilder."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_sends_system_and_prompt(self, scripted_complete):
        """The completion receives instructions and the assembled prompt."""
        complete = scripted_complete("[]")
        builder = CompletionBuilder(complete, product_name="Acme")
        await builder.run(BuildRequest(document_json="{}", message="hello"))
        (sent,) = complete.requests
        assert sent.system == builder.system_prompt
        assert sent.system.startswith("You are Acme,")
        assert sent.prompt.endswith("hello")
        assert sent.json_schema is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_structured_output_schema(self, scripted_complete):
        """Structured output attaches the ops schema."""
        complete = scripted_complete("[]")
        builder = CompletionBuilder(complete, structured_output=True)
        await builder.run(BuildRequest(document_json="{}", message="m"))
        assert complete.requests[0].json_schema["type"] == "array"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_exception_becomes_error(self, scripted_complete):
        """Completion failures are reported, not raised."""
        boom = RuntimeError("rate limited")
        builder = CompletionBuilder(scripted_complete(boom))
        result = await builder.run(BuildRequest(document_json="{}", message="m"))
        assert isinstance(result, ErrorResult)
        assert result.error is boom

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_text_is_error(self):
        """A completion returning something other than text is an error."""

        async def complete(request):
            return {"ops": []}

        result = await CompletionBuilder(complete).run(BuildRequest(document_json="{}", message="m"))
        assert isinstance(result, ErrorResult)
        assert isinstance(result.error, TypeError)


# =============================================================================
# Transform
# =============================================================================


class TestTransformCorePage:
    """Tests for transform_core_page."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_applies_generated_ops(self, sample_document, scripted_complete):
        """Encoded ops from the model are hydrated and applied."""
        ops = [
            {"op": "updateText", "nodeId": "title", "text": "Hello"},
            {"op": "updateStyle", "nodeId": "footer", "style": {"color": "muted"}},
        ]
        builder = CompletionBuilder(scripted_complete(json.dumps(encode_core_ops(ops))))
        result = await transform_core_page(sample_document, "Say hello", builder)
        assert result.change_count == 2
        assert result.changed
        assert result.reply is None
        assert result.diagnostics == []
        assert find_node(result.document.app, "title").text == "Hello"
        assert find_node(result.document.app, "footer").style.color == "muted"
        assert find_node(sample_document.app, "title").text == "Welcome"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_request_carries_document(self, sample_document):
        """The builder sees the serialized document and build state."""
        builder = _FixedBuilder(OpsResult([]))
        await transform_core_page(sample_document, "m", builder)
        (request,) = builder.requests
        assert json.loads(request.document_json) == to_wire(sample_document)
        assert request.new_build is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_new_build_flag(self):
        """An empty App is a new build."""
        builder = _FixedBuilder(OpsResult([]))
        await transform_core_page(new_document(title="Blank"), "m", builder)
        assert builder.requests[0].new_build is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reply_leaves_document(self, sample_document):
        """A reply returns the document unchanged."""
        result = await transform_core_page(
            sample_document, "What color?", _FixedBuilder(ReplyResult("Blue."))
        )
        assert result.reply == "Blue."
        assert result.change_count == 0
        assert to_wire(result.document) == to_wire(sample_document)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_prose_with_numbers_is_reply(self, scripted_complete):
        """A reply that quotes a numeric list leaves the page untouched."""
        text = "Headings support levels [1, 2, 3, 4, 5, 6]; no change needed."
        result = await transform_core_page(
            new_document(), "what levels?", CompletionBuilder(scripted_complete(text))
        )
        assert result.reply == text
        assert result.change_count == 0
        assert not result.changed

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_error_raises(self, sample_document):
        """Builder failures raise BuilderError chained to the cause."""
        cause = RuntimeError("offline")
        with pytest.raises(BuilderError, match="offline") as excinfo:
            await transform_core_page(sample_document, "m", _FixedBuilder(ErrorResult(cause)))
        assert excinfo.value.__cause__ is cause

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_error_diagnostics_logged(self, sample_document, caplog):
        """Dangling targets are reported and logged but not fatal."""
        ops = [
            {
                "op": "addEvent",
                "nodeId": "b1",
                "event": {"event": "click", "do": [{"type": "focus", "target": "ghost"}]},
            }
        ]
        with caplog.at_level(logging.WARNING, logger="pagecore.builder.lib"):
            result = await transform_core_page(
                sample_document, "m", _FixedBuilder(OpsResult(ops)), strict=False
            )
        assert [d.code for d in result.diagnostics] == ["unresolved_target"]
        assert "Validation errors after applying 1 op(s)" in caplog.text

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_strict_mode_raises(self, sample_document):
        """Strict mode rejects documents with error diagnostics."""
        ops = [{"op": "updateText", "nodeId": "footer", "text": "x"}]
        ops.append(
            {
                "op": "insert",
                "parentId": "hero",
                "position": "append",
                "node": {"id": "title", "type": "Text"},
            }
        )
        with pytest.raises(ValidationFailedError) as excinfo:
            await transform_core_page(sample_document, "m", _FixedBuilder(OpsResult(ops)), strict=True)
        assert [d.code for d in excinfo.value.diagnostics] == ["duplicate_id"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_strict_from_config(self, sample_document, monkeypatch):
        """Strict mode can be switched on through the environment."""
        monkeypatch.setenv("PAGECORE_STRICT_VALIDATION", "true")
        ops = [{"op": "insert", "parentId": "app", "position": "append", "node": {"id": "b1", "type": "Text"}}]
        with pytest.raises(ValidationFailedError):
            await transform_core_page(sample_document, "m", _FixedBuilder(OpsResult(ops)))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_accepts_wire_document(self, sample_document_dict):
        """Wire dicts are loaded first."""
        result = await transform_core_page(sample_document_dict, "m", _FixedBuilder(OpsResult([])))
        assert result.document.title == "Demo"
