"""Unit tests for validation module."""

import pytest

from pagecore.ir import CoreDocument, CoreNode, ScriptModule, load_document, to_wire
from pagecore.validation import (
    Diagnostic,
    Severity,
    errors_only,
    has_errors,
    is_valid,
    validate_document,
)


def _doc(*children, **app_fields) -> CoreDocument:
    return CoreDocument(
        app=CoreNode(id="app", type=app_fields.pop("type", "App"), children=list(children)),
        **app_fields,
    )


def _codes(diagnostics):
    return [d.code for d in diagnostics]


class TestValidateDocument:
    """Tests for validate_document."""

    @pytest.mark.unit
    def test_sample_is_clean(self, sample_document):
        """A well-formed document has no diagnostics."""
        assert validate_document(sample_document) == []
        assert is_valid(sample_document)

    @pytest.mark.unit
    def test_does_not_mutate(self, sample_document):
        """Validation leaves the document untouched."""
        before = to_wire(sample_document)
        validate_document(sample_document)
        assert to_wire(sample_document) == before

    @pytest.mark.unit
    def test_duplicate_id_single_error(self):
        """A duplicated id yields exactly one error naming it."""
        doc = _doc(
            CoreNode(id="dup", type="Text"),
            CoreNode(id="dup", type="Text"),
        )
        diagnostics = validate_document(doc)
        assert len(diagnostics) == 1
        assert diagnostics[0].severity == Severity.ERROR
        assert diagnostics[0].code == "duplicate_id"
        assert '"dup"' in diagnostics[0].message
        assert diagnostics[0].path == "app.children[1]"

    @pytest.mark.unit
    def test_triple_duplicate_counts(self):
        """The error reports how many times the id occurs."""
        doc = _doc(*(CoreNode(id="dup", type="Text") for _ in range(3)))
        diagnostics = validate_document(doc)
        assert len(diagnostics) == 1
        assert "3 times" in diagnostics[0].message

    @pytest.mark.unit
    def test_unknown_type(self):
        """Unknown node types are errors at the type path."""
        doc = _doc(CoreNode(id="c", type="Carousel"))
        diagnostics = validate_document(doc)
        assert _codes(diagnostics) == ["unknown_type"]
        assert diagnostics[0].path == "app.children[0].type"

    @pytest.mark.unit
    def test_missing_event_name_and_empty_effects(self):
        """Nameless bindings are errors and effectless ones warnings."""
        node = CoreNode.model_validate(
            {"id": "b", "type": "Button", "events": [{"do": []}]}
        )
        diagnostics = validate_document(_doc(node))
        by_code = {d.code: d for d in diagnostics}
        assert by_code["missing_event"].severity == Severity.ERROR
        assert by_code["missing_event"].path == "app.children[0].events[0].event"
        assert by_code["empty_effects"].severity == Severity.WARNING

    @pytest.mark.unit
    def test_unresolved_target(self):
        """Targets must name existing nodes."""
        node = CoreNode.model_validate(
            {
                "id": "b",
                "type": "Button",
                "events": [
                    {
                        "event": "click",
                        "do": [
                            {"type": "setState", "key": "x", "value": 1},
                            {"type": "toggleTarget", "target": "nowhere"},
                        ],
                    }
                ],
            }
        )
        diagnostics = validate_document(_doc(node))
        assert _codes(diagnostics) == ["unresolved_target"]
        assert diagnostics[0].path == "app.children[0].events[0].do[1].target"

    @pytest.mark.unit
    def test_target_resolving_later_in_tree(self):
        """Targets may point at nodes later in document order."""
        button = CoreNode.model_validate(
            {
                "id": "b",
                "type": "Button",
                "events": [{"event": "click", "do": [{"type": "focus", "target": "field"}]}],
            }
        )
        doc = _doc(button, CoreNode(id="field", type="Input"))
        assert validate_document(doc) == []

    @pytest.mark.unit
    def test_unknown_style_key_warning(self):
        """Unknown style keys produce warnings only."""
        node = CoreNode.model_validate(
            {"id": "t", "type": "Text", "style": {"glow": "max"}}
        )
        diagnostics = validate_document(_doc(node))
        assert _codes(diagnostics) == ["unknown_style_key"]
        assert not has_errors(diagnostics)
        assert diagnostics[0].path == "app.children[0].style.glow"

    @pytest.mark.unit
    def test_root_not_app_warning(self):
        """A non-App root is flagged."""
        diagnostics = validate_document(_doc(type="Page"))
        assert _codes(diagnostics) == ["root_not_app"]

    @pytest.mark.unit
    def test_on_state_motion_needs_key(self):
        """onState motion without stateKey is flagged."""
        node = CoreNode.model_validate(
            {
                "id": "m",
                "type": "Box",
                "motion": {"mode": "preset", "preset": "pulse", "trigger": "onState"},
            }
        )
        assert _codes(validate_document(_doc(node))) == ["missing_state_key"]

    @pytest.mark.unit
    def test_unknown_animation_warning(self):
        """runAnimation with an unknown preset is flagged."""
        node = CoreNode.model_validate(
            {
                "id": "b",
                "type": "Button",
                "events": [{"event": "click", "do": [{"type": "runAnimation", "animation": "wobble"}]}],
            }
        )
        assert _codes(validate_document(_doc(node))) == ["unknown_animation"]


class TestModules:
    """Tests for script module checks."""

    @pytest.mark.unit
    def test_duplicate_module_id(self):
        """Module ids must be unique."""
        doc = _doc(
            modules=[
                ScriptModule(id="m", source="console.log(1)"),
                ScriptModule(id="m", source="console.log(2)"),
            ]
        )
        diagnostics = validate_document(doc)
        assert _codes(diagnostics) == ["duplicate_module"]
        assert diagnostics[0].path == "modules[1].id"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "source",
        ["eval('1')", "const f = new Function('return 1')", "await import ('./x.js')"],
    )
    def test_deny_list_warnings(self, source):
        """Eval-like constructs are warnings, not errors."""
        doc = _doc(modules=[ScriptModule(id="m", source=source)])
        diagnostics = validate_document(doc)
        assert _codes(diagnostics) == ["unsafe_module_source"]
        assert diagnostics[0].severity == Severity.WARNING
        assert diagnostics[0].path == "modules[0].source"

    @pytest.mark.unit
    def test_harmless_source(self):
        """Identifiers merely containing deny-listed words pass."""
        doc = _doc(modules=[ScriptModule(id="m", source="const evaluate = retrieval(1);")])
        assert validate_document(doc) == []


class TestHelpers:
    """Tests for diagnostic helpers."""

    @pytest.mark.unit
    def test_errors_only(self):
        """errors_only drops warnings."""
        diagnostics = [
            Diagnostic(Severity.WARNING, "a", "w"),
            Diagnostic(Severity.ERROR, "b", "e"),
        ]
        assert [d.path for d in errors_only(diagnostics)] == ["b"]
        assert has_errors(diagnostics)
        assert not has_errors(diagnostics[:1])

    @pytest.mark.unit
    def test_str(self):
        """Diagnostics render as one line."""
        assert str(Diagnostic(Severity.ERROR, "app", "bad")) == "[error] app: bad"

    @pytest.mark.unit
    def test_loaded_document_with_duplicate(self, sample_document_dict):
        """Duplicates in wire documents are found after loading."""
        sample_document_dict["app"]["children"][1]["id"] = "title"
        doc = load_document(sample_document_dict)
        assert not is_valid(doc)
