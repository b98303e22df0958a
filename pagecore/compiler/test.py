"""Unit tests for the HTML compiler."""

import json
from html.parser import HTMLParser

import pytest

from pagecore.adapters import get_adapter
from pagecore.compiler import (
    DEFAULT_TITLE,
    MOTION_PRESET_CSS,
    VOID_ELEMENTS,
    compile_document,
    compile_with_report,
    escape_html,
)
from pagecore.ir import CoreDocument, CoreNode, DocumentError, MotionPresetName, ScriptModule
from pagecore.runtime import get_runtime_js


class _ElementIndex(HTMLParser):
    """Collects the attributes of every element carrying data-core-id."""

    def __init__(self):
        super().__init__()
        self.by_id: dict[str, tuple[str, dict[str, str | None]]] = {}

    def handle_starttag(self, tag, attrs):
        attr_map = dict(attrs)
        node_id = attr_map.get("data-core-id")
        if node_id is not None:
            self.by_id[node_id] = (tag, attr_map)


def _index(html: str) -> dict[str, tuple[str, dict[str, str | None]]]:
    parser = _ElementIndex()
    parser.feed(html)
    return parser.by_id


def _page(*children: CoreNode, **app_props) -> CoreDocument:
    return CoreDocument(
        app=CoreNode(id="app", type="App", props=app_props or None, children=list(children))
    )


class TestPageAssembly:
    """Tests for the page envelope."""

    @pytest.mark.unit
    def test_deterministic(self, sample_document):
        """Compiling the same document twice yields identical output."""
        assert compile_document(sample_document, "fluentlm") == compile_document(
            sample_document, "fluentlm"
        )

    @pytest.mark.unit
    def test_head_and_lang(self, sample_document):
        """The head carries meta tags, the title and adapter styles."""
        html = compile_document(sample_document, "fluentlm")
        assert html.startswith("<!DOCTYPE html>\n<html lang=\"en\">")
        assert '<meta charset="UTF-8">' in html
        assert "<title>Demo</title>" in html
        assert "fluentlm.min.css" in html
        assert "<link rel=\"stylesheet\"" in html

    @pytest.mark.unit
    def test_default_title(self, static_document):
        """A missing title falls back to the default."""
        static_document.app.props = None
        html = compile_document(static_document, "none")
        assert f"<title>{DEFAULT_TITLE}</title>" in html

    @pytest.mark.unit
    def test_title_escaped(self):
        """Titles are HTML-escaped."""
        html = compile_document(_page(title="A <b> & C"), "none")
        assert "<title>A &lt;b&gt; &amp; C</title>" in html

    @pytest.mark.unit
    def test_static_page_has_no_scripts(self, static_document):
        """No events, motion or state means no runtime and no bootstrap."""
        result = compile_with_report(static_document, "none")
        assert not result.runtime_embedded
        assert result.presets_used == []
        assert "<script" not in result.html
        assert "core-motion-presets" not in result.html

    @pytest.mark.unit
    def test_runtime_and_state_embedded(self, sample_document):
        """Interactive pages embed state then the runtime."""
        result = compile_with_report(sample_document, "none")
        html = result.html
        assert result.runtime_embedded
        state_at = html.index('<script id="core-state-init">')
        runtime_at = html.index('<script id="core-runtime">')
        assert state_at < runtime_at
        assert 'window.__coreState = {"open":false,"items":[]};' in html
        assert get_runtime_js() in html

    @pytest.mark.unit
    def test_state_script_cannot_close_early(self):
        """A state string containing a closing tag is escaped."""
        doc = _page(state={"note": "</script><b>"})
        html = compile_document(doc, "none")
        assert "</script><b>" not in html
        assert '"note":"<\\/script><b>"' in html

    @pytest.mark.unit
    def test_motion_only_embeds_runtime(self):
        """Motion without events still needs the runtime."""
        doc = _page(
            CoreNode.model_validate(
                {"id": "m", "type": "Box", "motion": {"mode": "preset", "preset": "spin"}}
            )
        )
        assert compile_with_report(doc, "none").runtime_embedded

    @pytest.mark.unit
    def test_assets_order(self):
        """Document assets follow adapter assets."""
        doc = CoreDocument.model_validate(
            {
                "app": {"id": "app", "type": "App"},
                "assets": {"styles": ["/site.css"], "scripts": ["/site.js"]},
            }
        )
        html = compile_document(doc, "fluentlm")
        assert html.index("theme-light.css") < html.index("/site.css")
        assert html.index("fluentlm.min.js") < html.index("/site.js")

    @pytest.mark.unit
    def test_modules_emitted_last(self, sample_document):
        """Script modules follow the runtime, each with its own id."""
        sample_document.modules = [
            ScriptModule(id="chart", source="console.log('a');"),
            ScriptModule(id="clock", source="console.log('b');"),
        ]
        html = compile_document(sample_document, "none")
        assert '<script type="module" id="core-module-chart">' in html
        assert '<script type="module" id="core-module-clock">' in html
        assert html.index('id="core-runtime"') < html.index('id="core-module-chart"')

    @pytest.mark.unit
    def test_accepts_wire_form(self, sample_document_dict):
        """Dicts are loaded before compiling."""
        assert "<title>Demo</title>" in compile_document(sample_document_dict, "none")

    @pytest.mark.unit
    def test_rejects_malformed(self):
        """Non-documents raise DocumentError."""
        with pytest.raises(DocumentError):
            compile_document({"nope": True}, "none")


class TestAdapterSelection:
    """Tests for adapter resolution."""

    @pytest.mark.unit
    def test_instance_or_name(self, sample_document):
        """Adapters can be passed as instances or names."""
        assert compile_document(sample_document, get_adapter("none")) == compile_document(
            sample_document, "none"
        )

    @pytest.mark.unit
    def test_default_from_config(self, sample_document, monkeypatch):
        """Without an adapter the configured one is used."""
        monkeypatch.setenv("PAGECORE_ADAPTER", "none")
        assert compile_document(sample_document) == compile_document(sample_document, "none")

    @pytest.mark.unit
    def test_unknown_adapter(self, sample_document):
        """Unknown adapter names raise KeyError."""
        with pytest.raises(KeyError, match="Unknown adapter"):
            compile_document(sample_document, "bootstrap")


class TestMotionPresets:
    """Tests for preset keyframe emission."""

    @pytest.mark.unit
    def test_every_preset_has_css(self):
        """Each preset name has keyframes and a class rule."""
        for preset in MotionPresetName:
            css = MOTION_PRESET_CSS[preset.value]
            assert f"@keyframes core-motion-{preset.value}" in css
            assert f".core-motion-{preset.value}{{" in css

    @pytest.mark.unit
    def test_preset_deduplicated(self):
        """A preset used three times is emitted once."""
        nodes = [
            CoreNode.model_validate(
                {"id": f"n{i}", "type": "Box", "motion": {"mode": "preset", "preset": "fadeIn"}}
            )
            for i in range(3)
        ]
        result = compile_with_report(_page(*nodes), "none")
        assert result.html.count("@keyframes core-motion-fadeIn") == 1
        assert result.presets_used == ["fadeIn"]

    @pytest.mark.unit
    def test_only_used_presets(self, sample_document):
        """Unused presets are left out."""
        html = compile_document(sample_document, "none")
        assert "core-motion-fadeIn" in html
        assert "@keyframes core-motion-spin" not in html

    @pytest.mark.unit
    def test_run_animation_presets_emitted(self):
        """Presets named by runAnimation effects get keyframes too."""
        button = CoreNode.model_validate(
            {
                "id": "b",
                "type": "Button",
                "events": [{"event": "click", "do": [{"type": "runAnimation", "animation": "shake"}]}],
            }
        )
        result = compile_with_report(_page(button), "none")
        assert result.presets_used == ["shake"]
        assert "@keyframes core-motion-shake" in result.html

    @pytest.mark.unit
    def test_keyframes_motion_needs_no_css(self):
        """Keyframe motion is played by the runtime, not by preset CSS."""
        node = CoreNode.model_validate(
            {
                "id": "k",
                "type": "Box",
                "motion": {"mode": "keyframes", "keyframes": [{"opacity": 0}, {"opacity": 1}]},
            }
        )
        result = compile_with_report(_page(node), "none")
        assert result.presets_used == []
        assert result.runtime_embedded


class TestNodeRendering:
    """Tests for per-node markup."""

    @pytest.mark.unit
    def test_button_click_scenario(self, sample_document):
        """The toggle button carries its id, classes and parsed bindings."""
        html = compile_document(sample_document, "fluentlm")
        tag, attrs = _index(html)["b1"]
        assert tag == "button"
        assert attrs["class"] == "flm-button flm-button--primary"
        assert json.loads(attrs["data-core-events"]) == [
            {"event": "click", "do": [{"type": "toggleTarget", "target": "panel"}]}
        ]
        assert ">Toggle</button>" in html

    @pytest.mark.unit
    def test_motion_attribute(self, sample_document):
        """Motion specs serialize to a data attribute."""
        _, attrs = _index(compile_document(sample_document, "none"))["panel"]
        assert json.loads(attrs["data-core-motion"]) == {
            "mode": "preset",
            "preset": "fadeIn",
            "duration": 300,
        }

    @pytest.mark.unit
    def test_every_node_tagged(self, sample_document):
        """Each node renders with its data-core-id."""
        ids = set(_index(compile_document(sample_document, "none")))
        assert ids == {"app", "hero", "title", "b1", "panel", "footer"}

    @pytest.mark.unit
    def test_adapter_style_precedes_tokens(self):
        """Adapter inline styles come before token styles."""
        node = CoreNode.model_validate({"id": "s", "type": "Stack", "style": {"gap": "md"}})
        _, attrs = _index(compile_document(_page(node), "none"))["s"]
        assert attrs["style"] == "display:flex;flex-direction:column;gap:1rem"

    @pytest.mark.unit
    def test_heading_level(self, sample_document):
        """Heading level selects the heading rank."""
        tag, _ = _index(compile_document(sample_document, "none"))["title"]
        assert tag == "h1"

    @pytest.mark.unit
    def test_void_elements(self):
        """Void elements get neither content nor a closing tag."""
        nodes = [
            CoreNode(id="img", type="Image", props={"src": "/a.png"}, text="ignored"),
            CoreNode(id="in", type="Input", children=[CoreNode(id="kid", type="Text", text="lost")]),
            CoreNode(id="hr", type="Divider"),
        ]
        html = compile_document(_page(*nodes), "none")
        for tag in ("img", "input", "hr"):
            assert tag in VOID_ELEMENTS
            assert f"</{tag}>" not in html
        assert "ignored" not in html
        assert "lost" not in html

    @pytest.mark.unit
    def test_text_escaped_rich_text_raw(self):
        """Plain text is escaped while RichText passes through."""
        nodes = [
            CoreNode(id="t", type="Text", text="<b>bold</b>"),
            CoreNode(id="r", type="RichText", text="<b>bold</b>"),
        ]
        html = compile_document(_page(*nodes), "none")
        assert "&lt;b&gt;bold&lt;/b&gt;</p>" in html
        assert "<b>bold</b></div>" in html

    @pytest.mark.unit
    def test_aria_and_identity_props(self):
        """ARIA and id props become attributes."""
        node = CoreNode(
            id="n",
            type="Box",
            props={"ariaLabel": "Main", "ariaDescribedBy": "help", "role": "region", "id": "main"},
        )
        _, attrs = _index(compile_document(_page(node), "none"))["n"]
        assert attrs["aria-label"] == "Main"
        assert attrs["aria-describedby"] == "help"
        assert attrs["role"] == "region"
        assert attrs["id"] == "main"

    @pytest.mark.unit
    def test_bind_and_show(self):
        """State binding props become runtime attributes."""
        nodes = [
            CoreNode(id="count", type="Text", props={"bind": "count"}),
            CoreNode(id="box", type="Box", props={"show": "open"}),
        ]
        index = _index(compile_document(_page(*nodes), "none"))
        assert index["count"][1]["data-core-bind"] == "count"
        assert index["box"][1]["data-core-show"] == "open"

    @pytest.mark.unit
    def test_checkbox_binds_inner_input(self):
        """Checkbox binding lands on the synthesized input."""
        node = CoreNode(
            id="agree", type="Checkbox", props={"bind": "agreed", "checked": True}, text="I agree"
        )
        html = compile_document(_page(node), "none")
        assert "data-core-bind" not in _index(html)["agree"][1]
        assert '<input type="checkbox" class="flm-checkbox-input" checked data-core-bind="agreed">' in html
        assert '<span class="flm-checkbox-label">I agree</span>' in html

    @pytest.mark.unit
    def test_select_options(self):
        """Select options come from props."""
        node = CoreNode(
            id="s",
            type="Select",
            props={"options": [{"value": "a", "label": "A", "selected": True}, "b"]},
        )
        html = compile_document(_page(node), "none")
        assert '<option value="a" selected>A</option><option value="b">b</option>' in html

    @pytest.mark.unit
    def test_table(self):
        """Tables render header and body rows."""
        node = CoreNode(
            id="t", type="Table", props={"headers": ["Name", "Qty"], "rows": [["Tea", 2]]}
        )
        html = compile_document(_page(node), "none")
        assert "<thead><tr><th>Name</th><th>Qty</th></tr></thead>" in html
        assert "<tbody><tr><td>Tea</td><td>2</td></tr></tbody>" in html

    @pytest.mark.unit
    def test_tabs(self):
        """Tabs render a tab strip."""
        node = CoreNode(
            id="tabs",
            type="Tabs",
            props={"tabs": [{"id": "one", "label": "One", "active": True}, {"id": "two", "label": "Two"}]},
        )
        html = compile_document(_page(node), "none")
        assert 'role="tablist"' in html
        assert 'aria-selected="true" data-panel="one">One</button>' in html
        assert 'class="flm-pivot-tab" role="tab" aria-selected="false" data-panel="two"' in html

    @pytest.mark.unit
    def test_disclosure_summary(self):
        """Disclosures render their summary first."""
        node = CoreNode(
            id="d",
            type="Disclosure",
            props={"summary": "More"},
            children=[CoreNode(id="x", type="Text", text="Details")],
        )
        html = compile_document(_page(node), "none")
        assert "<summary>More</summary><p" in html

    @pytest.mark.unit
    def test_dialog_title_wraps_children(self):
        """A titled dialog wraps its children in a body element."""
        node = CoreNode(
            id="dlg",
            type="Dialog",
            props={"title": "Confirm"},
            children=[CoreNode(id="x", type="Text", text="Sure?")],
        )
        html = compile_document(_page(node), "fluentlm")
        assert '<h2 class="flm-dialog-title">Confirm</h2></div><div class="flm-dialog-body"><p' in html
        assert "Sure?</p></div></dialog>" in html

    @pytest.mark.unit
    def test_toast_region(self):
        """Toast regions get the runtime marker and toast styles."""
        html = compile_document(_page(CoreNode(id="toasts", type="ToastRegion")), "fluentlm")
        _, attrs = _index(html)["toasts"]
        assert "data-core-toast-region" in attrs
        assert '<style id="core-toast-styles">' in html


class TestEscapeHtml:
    """Tests for escape_html."""

    @pytest.mark.unit
    def test_escapes_specials(self):
        """Ampersands, angle brackets and double quotes are escaped."""
        assert escape_html('a & <b> "c"') == "a &amp; &lt;b&gt; &quot;c&quot;"

    @pytest.mark.unit
    def test_ampersand_first(self):
        """Escaping does not double-escape its own output."""
        assert escape_html("<") == "&lt;"
