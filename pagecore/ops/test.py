"""Unit tests for the tree ops engine."""

import logging

import pytest

from pagecore.ir import (
    CoreNode,
    DocumentError,
    PresetMotion,
    find_node,
    iter_ids,
    to_wire,
)
from pagecore.ops import (
    DeleteOp,
    InsertOp,
    UpdateTextOp,
    apply_core_ops,
    fresh_id,
    parse_core_ops,
)


def _ids(document):
    return list(iter_ids(document.app))


class TestPurity:
    """apply_core_ops never mutates its inputs."""

    @pytest.mark.unit
    def test_input_document_untouched(self, sample_document):
        """The original document keeps its shape after edits."""
        before = to_wire(sample_document)
        apply_core_ops(
            sample_document,
            [
                {"op": "updateText", "nodeId": "title", "text": "Changed"},
                {"op": "delete", "nodeId": "footer"},
            ],
        )
        assert to_wire(sample_document) == before

    @pytest.mark.unit
    def test_inserted_node_is_copied(self, sample_document):
        """Later edits to the result do not leak into op payloads."""
        node = CoreNode(id="n1", type="Text", text="one")
        op = InsertOp.into_parent("app", node)
        result = apply_core_ops(sample_document, [op])
        find_node(result.app, "n1").text = "mutated"
        assert node.text == "one"

    @pytest.mark.unit
    def test_empty_batch_returns_equal_copy(self, sample_document):
        """No ops yields an equal but distinct document."""
        result = apply_core_ops(sample_document, [])
        assert result is not sample_document
        assert to_wire(result) == to_wire(sample_document)


class TestUpdates:
    """Tests for update ops."""

    @pytest.mark.unit
    def test_update_props_merges(self, sample_document):
        """Props are shallow-merged."""
        result = apply_core_ops(
            sample_document,
            [{"op": "updateProps", "nodeId": "b1", "props": {"disabled": True}}],
        )
        assert find_node(result.app, "b1").props == {"variant": "primary", "disabled": True}

    @pytest.mark.unit
    def test_update_style_merges(self, sample_document):
        """Style tokens are shallow-merged."""
        result = apply_core_ops(
            sample_document,
            [{"op": "updateStyle", "nodeId": "hero", "style": {"radius": "md", "bg": "primary"}}],
        )
        style = find_node(result.app, "hero").style
        assert style.space == "lg"
        assert style.radius == "md"
        assert style.bg == "primary"

    @pytest.mark.unit
    def test_update_style_on_unstyled_node(self, sample_document):
        """A node without style gains one."""
        result = apply_core_ops(
            sample_document,
            [{"op": "updateStyle", "nodeId": "title", "style": {"color": "primary"}}],
        )
        assert to_wire(find_node(result.app, "title").style) == {"color": "primary"}

    @pytest.mark.unit
    def test_update_text(self, sample_document):
        """Text is replaced."""
        result = apply_core_ops(
            sample_document, [UpdateTextOp(node_id="title", text="Hello")]
        )
        assert find_node(result.app, "title").text == "Hello"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "op",
        [
            {"op": "updateProps", "nodeId": "b1", "props": {}},
            {"op": "updateStyle", "nodeId": "hero", "style": {}},
            {"op": "updateProps", "nodeId": "title", "props": {}},
        ],
    )
    def test_empty_delta_is_identity(self, sample_document, op):
        """Empty deltas leave the document unchanged."""
        result = apply_core_ops(sample_document, [op])
        assert to_wire(result) == to_wire(sample_document)

    @pytest.mark.unit
    def test_update_animation_replaces(self, sample_document):
        """Motion is replaced wholesale."""
        result = apply_core_ops(
            sample_document,
            [
                {
                    "op": "updateAnimation",
                    "nodeId": "panel",
                    "motion": {"mode": "preset", "preset": "slideUp"},
                }
            ],
        )
        motion = find_node(result.app, "panel").motion
        assert isinstance(motion, PresetMotion)
        assert motion.preset == "slideUp"
        assert motion.duration is None

    @pytest.mark.unit
    def test_update_animation_clears(self, sample_document):
        """A null motion removes the animation."""
        result = apply_core_ops(
            sample_document, [{"op": "updateAnimation", "nodeId": "panel", "motion": None}]
        )
        assert find_node(result.app, "panel").motion is None


class TestStructural:
    """Tests for replace, delete and insert."""

    @pytest.mark.unit
    def test_replace_subtree(self, sample_document):
        """The matching subtree is swapped out."""
        result = apply_core_ops(
            sample_document,
            [{"op": "replace", "nodeId": "hero", "node": {"id": "hero2", "type": "Card"}}],
        )
        assert _ids(result) == ["app", "hero2", "footer"]

    @pytest.mark.unit
    def test_replace_root(self, sample_document):
        """The root itself can be replaced."""
        result = apply_core_ops(
            sample_document,
            [{"op": "replace", "nodeId": "app", "node": {"id": "app", "type": "App"}}],
        )
        assert result.app.children is None

    @pytest.mark.unit
    def test_delete_grandchild(self, sample_document):
        """Deleting a nested node removes only that node."""
        result = apply_core_ops(sample_document, [DeleteOp(node_id="title")])
        hero = find_node(result.app, "hero")
        assert [c.id for c in hero.children] == ["b1", "panel"]
        assert find_node(result.app, "footer") is not None

    @pytest.mark.unit
    def test_delete_root_is_noop(self, sample_document):
        """The root is never removed."""
        result = apply_core_ops(sample_document, [{"op": "delete", "nodeId": "app"}])
        assert to_wire(result) == to_wire(sample_document)

    @pytest.mark.unit
    def test_append_and_prepend(self, sample_document):
        """prepend and append address the parent's own children."""
        result = apply_core_ops(
            sample_document,
            [
                InsertOp.into_parent("hero", CoreNode(id="last", type="Text")),
                InsertOp.into_parent("hero", CoreNode(id="first", type="Text"), at="prepend"),
            ],
        )
        hero = find_node(result.app, "hero")
        assert [c.id for c in hero.children] == ["first", "title", "b1", "panel", "last"]

    @pytest.mark.unit
    def test_append_creates_children(self, sample_document):
        """Appending to a leaf creates its children list."""
        result = apply_core_ops(
            sample_document,
            [{"op": "insert", "parentId": "panel", "position": "append",
              "node": {"id": "inner", "type": "Text"}}],
        )
        assert [c.id for c in find_node(result.app, "panel").children] == ["inner"]

    @pytest.mark.unit
    def test_before_and_after_sibling(self, sample_document):
        """before and after splice next to the named sibling."""
        result = apply_core_ops(
            sample_document,
            [
                InsertOp.relative_to_sibling("b1", CoreNode(id="pre", type="Text"), side="before"),
                InsertOp.relative_to_sibling("b1", CoreNode(id="post", type="Text")),
            ],
        )
        hero = find_node(result.app, "hero")
        assert [c.id for c in hero.children] == ["title", "pre", "b1", "post", "panel"]

    @pytest.mark.unit
    def test_sibling_insert_next_to_root_is_noop(self, sample_document):
        """The root has no parent to splice into."""
        result = apply_core_ops(
            sample_document,
            [InsertOp.relative_to_sibling("app", CoreNode(id="x", type="Text"))],
        )
        assert "x" not in _ids(result)

    @pytest.mark.unit
    def test_anchor_kind(self):
        """anchor_kind distinguishes container from sibling addressing."""
        node = CoreNode(id="n", type="Text")
        assert InsertOp.into_parent("p", node).anchor_kind == "parent"
        assert InsertOp.relative_to_sibling("s", node).anchor_kind == "sibling"

    @pytest.mark.unit
    def test_helper_rejects_wrong_position(self):
        """Helpers refuse positions from the other addressing mode."""
        node = CoreNode(id="n", type="Text")
        with pytest.raises(ValueError):
            InsertOp.into_parent("p", node, at="before")
        with pytest.raises(ValueError):
            InsertOp.relative_to_sibling("s", node, side="append")


class TestEvents:
    """Tests for addEvent and removeEvent."""

    @pytest.mark.unit
    def test_add_event_appends(self, sample_document):
        """New bindings are appended."""
        result = apply_core_ops(
            sample_document,
            [{"op": "addEvent", "nodeId": "b1",
              "event": {"event": "hover", "do": [{"type": "runAnimation", "animation": "pulse"}]}}],
        )
        events = find_node(result.app, "b1").events
        assert [e.event for e in events] == ["click", "hover"]

    @pytest.mark.unit
    def test_remove_event(self, sample_document):
        """Bindings are removed by index."""
        result = apply_core_ops(
            sample_document, [{"op": "removeEvent", "nodeId": "b1", "eventIndex": 0}]
        )
        assert find_node(result.app, "b1").events == []

    @pytest.mark.unit
    @pytest.mark.parametrize("index", [1, 5, -1])
    def test_remove_event_out_of_range(self, sample_document, index):
        """Out-of-range indices are no-ops."""
        result = apply_core_ops(
            sample_document, [{"op": "removeEvent", "nodeId": "b1", "eventIndex": index}]
        )
        assert len(find_node(result.app, "b1").events) == 1


class TestTolerance:
    """Unknown ids and malformed ops do not sink the batch."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "op",
        [
            {"op": "updateProps", "nodeId": "ghost", "props": {"a": 1}},
            {"op": "updateStyle", "nodeId": "ghost", "style": {"color": "primary"}},
            {"op": "updateText", "nodeId": "ghost", "text": "x"},
            {"op": "replace", "nodeId": "ghost", "node": {"id": "y", "type": "Box"}},
            {"op": "delete", "nodeId": "ghost"},
            {"op": "insert", "parentId": "ghost", "position": "append", "node": {"id": "y", "type": "Box"}},
            {"op": "insert", "parentId": "ghost", "position": "after", "node": {"id": "y", "type": "Box"}},
            {"op": "addEvent", "nodeId": "ghost", "event": {"event": "click", "do": []}},
            {"op": "removeEvent", "nodeId": "ghost", "eventIndex": 0},
            {"op": "updateAnimation", "nodeId": "ghost", "motion": {"mode": "preset", "preset": "spin"}},
        ],
    )
    def test_unknown_id_is_noop(self, sample_document, op):
        """Ops on missing ids change nothing."""
        result = apply_core_ops(sample_document, [op])
        assert to_wire(result) == to_wire(sample_document)

    @pytest.mark.unit
    def test_malformed_op_skipped(self, sample_document, caplog):
        """Bad ops are logged and the rest still apply."""
        with caplog.at_level(logging.WARNING, logger="pagecore.ops.lib"):
            result = apply_core_ops(
                sample_document,
                [
                    {"op": "explode", "nodeId": "title"},
                    {"op": "updateStyle", "nodeId": "title", "style": "{\"color\": \"primary\"}"},
                    {"op": "updateText", "nodeId": "title", "text": "Still applied"},
                ],
            )
        assert find_node(result.app, "title").text == "Still applied"
        assert find_node(result.app, "title").style is None
        assert "op[0]" in caplog.text
        assert "op[1]" in caplog.text

    @pytest.mark.unit
    def test_parse_core_ops_reports_rejections(self):
        """parse_core_ops separates good and bad ops."""
        parsed, rejected = parse_core_ops(
            [{"op": "delete", "nodeId": "a"}, {"nodeId": "b"}, "junk"]
        )
        assert len(parsed) == 1
        assert [r.index for r in rejected] == [1, 2]
        assert rejected[0].raw == {"nodeId": "b"}

    @pytest.mark.unit
    @pytest.mark.parametrize("ops", [None, "[]", {"op": "delete", "nodeId": "a"}])
    def test_non_list_ops_raise(self, sample_document, ops):
        """Ops must be a list."""
        with pytest.raises(TypeError):
            apply_core_ops(sample_document, ops)

    @pytest.mark.unit
    def test_non_document_raises(self):
        """The document must be a CoreDocument."""
        with pytest.raises(DocumentError):
            apply_core_ops({"app": {"id": "app", "type": "App"}}, [])


class TestFreshIds:
    """Tests for fresh_id and id uniqueness after inserts."""

    @pytest.mark.unit
    def test_fresh_id_avoids_existing(self, sample_document):
        """Generated ids never collide with the document."""
        assert fresh_id(sample_document, "card") == "card"
        assert fresh_id(sample_document, "title") == "title-2"
        assert fresh_id(sample_document, "title", taken=["title-2"]) == "title-3"

    @pytest.mark.unit
    def test_inserts_with_fresh_ids_stay_unique(self, sample_document):
        """Inserting nodes with fresh ids keeps every id unique."""
        doc = sample_document
        for _ in range(3):
            new_id = fresh_id(doc, "item")
            doc = apply_core_ops(doc, [InsertOp.into_parent("hero", CoreNode(id=new_id, type="Text"))])
        ids = _ids(doc)
        assert len(ids) == len(set(ids))
        assert {"item", "item-2", "item-3"} <= set(ids)
