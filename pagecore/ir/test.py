"""Unit tests for IR models."""

import json

import pytest
from pydantic import ValidationError

from pagecore.ir import (
    EFFECT_TYPES,
    NODE_TYPES,
    STYLE_TOKEN_KEYS,
    CoreDocument,
    CoreNode,
    DocumentError,
    EventBinding,
    KeyframesMotion,
    NodeCategory,
    NodeType,
    PresetMotion,
    SetStateEffect,
    SpaceSides,
    StyleTokens,
    ToggleTargetEffect,
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


class TestNodeType:
    """Tests for NodeType enum."""

    @pytest.mark.unit
    def test_all_types_exist(self):
        """All 29 primitives are defined."""
        expected = {
            "App", "Page", "Section", "Box", "Stack", "Grid", "Cluster",
            "Spacer", "Divider", "Heading", "Text", "RichText", "Image",
            "Icon", "Button", "Link", "Form", "Input", "Select", "Checkbox",
            "Card", "List", "Table", "Badge", "Animate", "Disclosure", "Tabs",
            "Dialog", "ToastRegion",
        }
        assert NODE_TYPES == expected
        assert len(NodeType) == 29

    @pytest.mark.unit
    def test_every_type_has_category(self):
        """Each node type maps to a category."""
        for nt in NodeType:
            assert isinstance(get_node_category(nt), NodeCategory)

    @pytest.mark.unit
    def test_category_lookup_by_string(self):
        """Categories resolve from plain strings too."""
        assert get_node_category("Button") == NodeCategory.INTERACTIVE
        assert get_node_category("Dialog") == NodeCategory.DISCLOSURE

    @pytest.mark.unit
    def test_unknown_category_lookup(self):
        """Unknown types are rejected."""
        with pytest.raises(ValueError):
            get_node_category("Carousel")

    @pytest.mark.unit
    def test_types_by_category(self):
        """Form category lists the form controls."""
        assert get_types_by_category(NodeCategory.FORM) == [
            NodeType.FORM,
            NodeType.INPUT,
            NodeType.SELECT,
            NodeType.CHECKBOX,
        ]


class TestStyleTokens:
    """Tests for StyleTokens model."""

    @pytest.mark.unit
    def test_camel_case_wire_keys(self):
        """Snake-case fields serialize to camelCase."""
        style = StyleTokens(min_width="10rem", font_weight="bold")
        assert to_wire(style) == {"minWidth": "10rem", "fontWeight": "bold"}

    @pytest.mark.unit
    def test_parse_from_wire(self):
        """camelCase wire keys populate fields."""
        style = StyleTokens.model_validate({"textAlign": "center", "bg": "surface"})
        assert style.text_align == "center"
        assert style.bg == "surface"

    @pytest.mark.unit
    def test_space_accepts_token_or_sides(self):
        """space takes a scalar token or per-side spec."""
        assert StyleTokens.model_validate({"space": "md"}).space == "md"
        sides = StyleTokens.model_validate({"space": {"x": "lg", "top": "xs"}}).space
        assert isinstance(sides, SpaceSides)
        assert sides.x == "lg"

    @pytest.mark.unit
    def test_closed_vocabulary(self):
        """Values outside a token enumeration are rejected."""
        with pytest.raises(ValidationError):
            StyleTokens.model_validate({"color": "hotpink"})

    @pytest.mark.unit
    def test_opacity_range(self):
        """Opacity must lie in [0, 1]."""
        with pytest.raises(ValidationError):
            StyleTokens(opacity=1.5)

    @pytest.mark.unit
    def test_unknown_keys_preserved(self):
        """Unknown keys survive parsing and are reported."""
        style = StyleTokens.model_validate({"color": "primary", "glow": "lots"})
        assert style.unknown_keys == ["glow"]
        assert to_wire(style)["glow"] == "lots"

    @pytest.mark.unit
    def test_token_key_set(self):
        """Wire key set uses camelCase names."""
        assert "minWidth" in STYLE_TOKEN_KEYS
        assert "min_width" not in STYLE_TOKEN_KEYS
        assert "space" in STYLE_TOKEN_KEYS


class TestEvents:
    """Tests for event bindings and effects."""

    @pytest.mark.unit
    def test_do_alias(self):
        """Effects are read from and written to the `do` key."""
        binding = EventBinding.model_validate(
            {"event": "click", "do": [{"type": "toggleTarget", "target": "panel"}]}
        )
        assert isinstance(binding.effects[0], ToggleTargetEffect)
        wire = to_wire(binding)
        assert wire == {"event": "click", "do": [{"type": "toggleTarget", "target": "panel"}]}

    @pytest.mark.unit
    def test_discriminated_effects(self):
        """Each effect tag parses to its own model."""
        binding = EventBinding.model_validate(
            {
                "event": "submit",
                "do": [
                    {"type": "setState", "key": "sent", "value": True},
                    {"type": "fetchJson", "url": "/api/x", "resultKey": "x"},
                    {"type": "toast", "message": "Saved", "variant": "success"},
                ],
            }
        )
        assert isinstance(binding.effects[0], SetStateEffect)
        assert binding.effects[1].result_key == "x"
        assert binding.effects[2].variant == "success"

    @pytest.mark.unit
    def test_unknown_effect_rejected(self):
        """Unknown effect tags fail to parse."""
        with pytest.raises(ValidationError):
            EventBinding.model_validate({"event": "click", "do": [{"type": "explode"}]})

    @pytest.mark.unit
    def test_effect_type_list(self):
        """All eight effect kinds are listed."""
        assert len(EFFECT_TYPES) == 8

    @pytest.mark.unit
    def test_conditions(self):
        """Conditions parse with operator enum."""
        binding = EventBinding.model_validate(
            {
                "event": "click",
                "when": [{"key": "count", "op": "gte", "value": 3}],
                "do": [],
            }
        )
        assert binding.when[0].op == "gte"
        assert binding.when[0].value == 3


class TestMotion:
    """Tests for motion specs."""

    @pytest.mark.unit
    def test_preset_mode(self):
        """Preset motion is selected by mode."""
        node = CoreNode.model_validate(
            {"id": "a", "type": "Box", "motion": {"mode": "preset", "preset": "fadeIn"}}
        )
        assert isinstance(node.motion, PresetMotion)

    @pytest.mark.unit
    def test_keyframes_mode(self):
        """Keyframe motion keeps its frames and iteration count."""
        node = CoreNode.model_validate(
            {
                "id": "a",
                "type": "Box",
                "motion": {
                    "mode": "keyframes",
                    "keyframes": [{"opacity": 0}, {"opacity": 1}],
                    "iterations": "infinite",
                    "trigger": "onVisible",
                },
            }
        )
        assert isinstance(node.motion, KeyframesMotion)
        assert node.motion.iterations == "infinite"
        assert node.motion.trigger == "onVisible"

    @pytest.mark.unit
    def test_integer_duration_stays_integer(self):
        """Integer durations serialize as integers."""
        motion = PresetMotion(preset="slideUp", duration=300)
        assert to_wire(motion)["duration"] == 300
        assert isinstance(to_wire(motion)["duration"], int)


class TestCoreNode:
    """Tests for CoreNode model."""

    @pytest.mark.unit
    def test_minimal_node(self):
        """Create node with only required fields."""
        node = CoreNode(id="x", type=NodeType.TEXT)
        assert node.type == "Text"
        assert node.children is None
        assert to_wire(node) == {"id": "x", "type": "Text"}

    @pytest.mark.unit
    def test_unknown_type_survives(self):
        """Unknown node types parse so validation can report them."""
        node = CoreNode.model_validate({"id": "x", "type": "Carousel"})
        assert node.type == "Carousel"

    @pytest.mark.unit
    def test_missing_id_rejected(self):
        """Nodes must carry an id."""
        with pytest.raises(ValidationError):
            CoreNode.model_validate({"type": "Box"})


class TestTreeHelpers:
    """Tests for walk, iter_ids and find_node."""

    @pytest.mark.unit
    def test_walk_paths(self, sample_document):
        """walk yields pre-order nodes with dotted paths."""
        pairs = [(n.id, p) for n, p in walk(sample_document.app)]
        assert pairs[0] == ("app", "app")
        assert ("hero", "app.children[0]") in pairs
        assert ("title", "app.children[0].children[0]") in pairs

    @pytest.mark.unit
    def test_iter_ids(self, sample_document):
        """iter_ids lists every id in order."""
        assert list(iter_ids(sample_document.app))[:3] == ["app", "hero", "title"]

    @pytest.mark.unit
    def test_find_node(self, sample_document):
        """find_node returns the first match or None."""
        assert find_node(sample_document.app, "title").text == "Welcome"
        assert find_node(sample_document.app, "ghost") is None


class TestDocument:
    """Tests for CoreDocument and its helpers."""

    @pytest.mark.unit
    def test_new_document(self):
        """Empty documents are new builds with reserved props."""
        doc = new_document(title="Hi", lang="fr", state={"n": 1})
        assert doc.version == "1.0"
        assert doc.app.id == "app"
        assert doc.app.type == "App"
        assert doc.title == "Hi"
        assert doc.lang == "fr"
        assert doc.initial_state == {"n": 1}
        assert is_new_build(doc)

    @pytest.mark.unit
    def test_new_document_without_props(self):
        """A bare new document has no props and empty state."""
        doc = new_document()
        assert doc.app.props is None
        assert doc.title is None
        assert doc.initial_state == {}

    @pytest.mark.unit
    def test_not_new_build(self, sample_document):
        """Documents with children are not new builds."""
        assert not is_new_build(sample_document)

    @pytest.mark.unit
    def test_load_from_json(self, sample_document):
        """load_document accepts JSON text and round-trips."""
        text = dump_document(sample_document)
        loaded = load_document(text)
        assert isinstance(loaded, CoreDocument)
        assert to_wire(loaded) == to_wire(sample_document)

    @pytest.mark.unit
    def test_load_passthrough(self, sample_document):
        """Documents are returned as-is."""
        assert load_document(sample_document) is sample_document

    @pytest.mark.unit
    def test_wire_round_trip(self, sample_document_dict):
        """Parsing then serializing yields the same JSON."""
        doc = load_document(sample_document_dict)
        assert to_wire(doc) == sample_document_dict

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "payload",
        ["not json", "[1, 2]", '{"version": "1.0"}', 42, b'{"app": "\xff"}'],
    )
    def test_load_rejects_malformed(self, payload):
        """Malformed top-level input raises DocumentError."""
        with pytest.raises(DocumentError):
            load_document(payload)

    @pytest.mark.unit
    def test_document_error_is_value_error(self):
        """DocumentError can be caught as ValueError."""
        assert issubclass(DocumentError, ValueError)

    @pytest.mark.unit
    def test_dump_is_json(self, sample_document):
        """dump_document produces parseable JSON with camelCase keys."""
        data = json.loads(dump_document(sample_document, indent=None))
        assert data["app"]["id"] == "app"
