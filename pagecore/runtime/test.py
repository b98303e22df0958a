"""Tests for the page runtime script.

The source checks pin the DOM contract the compiler relies on. The behaviour
tests compile real pages, rebuild their body as a minimal DOM under node and
drive the embedded runtime through dispatched events.
"""

import json
import shutil
import subprocess
from html.parser import HTMLParser
from typing import Any

import pytest

from pagecore.compiler import VOID_ELEMENTS, compile_document
from pagecore.ir import EFFECT_TYPES, ConditionOp, MotionTrigger
from pagecore.runtime import (
    ATTR_BIND,
    ATTR_EVENTS,
    ATTR_ID,
    ATTR_MOTION,
    ATTR_SHOW,
    ATTR_TOAST_REGION,
    DELEGATED_EVENTS,
    MOTION_CLASS_PREFIX,
    RUNTIME_GLOBAL,
    STATE_GLOBAL,
    get_runtime_js,
)
from pagecore.runtime.lib import (
    TOAST_FADE_MS,
    TOAST_LIFETIME_MS,
    TOAST_SHOW_DELAY_MS,
    VISIBLE_THRESHOLD,
)


@pytest.fixture
def js() -> str:
    return get_runtime_js()


class TestRuntimeShape:
    """Tests for the script envelope."""

    @pytest.mark.unit
    def test_self_invoking(self, js):
        """The runtime is a strict-mode IIFE."""
        assert js.startswith("(function() {")
        assert js.rstrip().endswith("})();")
        assert "'use strict';" in js

    @pytest.mark.unit
    def test_stable(self):
        """Repeated calls return the same source."""
        assert get_runtime_js() == get_runtime_js()

    @pytest.mark.unit
    def test_no_script_terminator(self, js):
        """The source can be inlined in a script element."""
        assert "</script" not in js.lower()

    @pytest.mark.unit
    def test_dom_contract_attributes(self, js):
        """Every data attribute the compiler emits is read by the runtime."""
        for attr in (ATTR_ID, ATTR_EVENTS, ATTR_MOTION, ATTR_BIND, ATTR_SHOW, ATTR_TOAST_REGION):
            assert attr in js

    @pytest.mark.unit
    def test_template_fully_rendered(self, js):
        """Every placeholder is filled from the module constants."""
        assert "%%" not in js
        assert f"window.{STATE_GLOBAL} = window.{STATE_GLOBAL} || {{}};" in js
        assert f"window.{RUNTIME_GLOBAL} = {{ getState: getState" in js


class TestStateStore:
    """Tests for state handling."""

    @pytest.mark.unit
    def test_seeds_from_bootstrap(self, js):
        """The store reuses state seeded by the bootstrap script."""
        assert "window.__coreState = window.__coreState || {};" in js

    @pytest.mark.unit
    def test_set_state_syncs(self, js):
        """Every state write re-syncs the DOM."""
        body = js.split("function setState(key, value) {", 1)[1].split("\n  }\n", 1)[0]
        assert "syncDOM();" in body

    @pytest.mark.unit
    def test_bind_and_show(self, js):
        """Bound controls get values, other elements text; show toggles display."""
        assert "el.value = val;" in js
        assert "el.checked = !!val;" in js
        assert "el.textContent = String(val);" in js
        assert "el.style.display = getState(el.getAttribute(ATTR_SHOW)) ? '' : 'none';" in js


class TestConditions:
    """Tests for the condition evaluator."""

    @pytest.mark.unit
    @pytest.mark.parametrize("op", [op.value for op in ConditionOp])
    def test_every_operator_handled(self, js, op):
        """Each condition operator has a case."""
        assert f"case '{op}':" in js

    @pytest.mark.unit
    def test_contains_arrays_and_strings(self, js):
        """contains checks array membership and substrings."""
        assert "val.indexOf(c.value) !== -1" in js
        assert "String(val).indexOf(String(c.value)) !== -1" in js


class TestEffects:
    """Tests for the effect interpreter."""

    @pytest.mark.unit
    @pytest.mark.parametrize("effect", EFFECT_TYPES)
    def test_every_effect_handled(self, js, effect):
        """Each effect type has a case."""
        assert f"case '{effect}':" in js

    @pytest.mark.unit
    def test_run_animation_uses_preset_classes(self, js):
        """runAnimation adds the preset class and removes it afterwards."""
        assert MOTION_CLASS_PREFIX == "core-motion-"
        assert "var cls = MOTION_PREFIX + effect.animation;" in js
        assert "'animationend'" in js
        assert "core-animate-" not in js

    @pytest.mark.unit
    def test_toast_timing(self, js):
        """Toasts show, expire and fade on fixed timers."""
        assert f"}}, {TOAST_SHOW_DELAY_MS});" in js
        assert f"}}, {TOAST_LIFETIME_MS});" in js
        assert f"}}, {TOAST_FADE_MS});" in js
        assert "'core-toast core-toast--' + (effect.variant || 'info')" in js

    @pytest.mark.unit
    def test_emit_default_event(self, js):
        """emit falls back to core:event."""
        assert "effect.event || 'core:event'" in js


class TestListeners:
    """Tests for delegated listeners and motion triggers."""

    @pytest.mark.unit
    def test_delegated_events_capture(self, js):
        """Delegated listeners are registered in the capture phase."""
        listed = ", ".join(f"'{name}'" for name in DELEGATED_EVENTS)
        assert f"[{listed}].forEach" in js
        assert "document.addEventListener(eventType, handleCoreEvent, true);" in js

    @pytest.mark.unit
    def test_hover_listener(self, js):
        """Hover bindings run on pointer entry."""
        assert "document.addEventListener('pointerenter'" in js
        assert "runBindings(el, 'hover')" in js

    @pytest.mark.unit
    @pytest.mark.parametrize("trigger", [t.value for t in MotionTrigger])
    def test_every_trigger_handled(self, js, trigger):
        """Each motion trigger is wired."""
        assert f"'{trigger}'" in js

    @pytest.mark.unit
    def test_visible_observer(self, js):
        """onVisible uses an intersection observer that fires once."""
        assert f"{{ threshold: {VISIBLE_THRESHOLD} }}" in js
        assert "visibleObserver.unobserve(entry.target);" in js

    @pytest.mark.unit
    def test_keyframes_use_web_animations(self, js):
        """Keyframe motion runs through element.animate."""
        assert "el.animate(spec.keyframes" in js
        assert "spec.iterations === 'infinite' ? Infinity" in js


# =============================================================================
# Behaviour under node
# =============================================================================

NODE = shutil.which("node")

requires_node = pytest.mark.skipif(NODE is None, reason="node is not installed")

# Just enough DOM for the runtime: attribute selectors, closest(), classList,
# document-level listeners, recorded timers and a manual IntersectionObserver.
_STUB_DOM = r"""
var window = globalThis;
var timers = [];
function setTimeout(fn, ms) { timers.push({ fn: fn, ms: ms }); }

function matches(el, sel) {
  var m = /^\[([\w-]+)(?:="(.*)")?\]$/.exec(sel);
  if (m) return m[2] === undefined ? el.hasAttribute(m[1]) : el.getAttribute(m[1]) === m[2];
  if (sel.charAt(0) === '.') {
    var name = sel.slice(1);
    return el.classes.indexOf(name) !== -1 || String(el.className || '').split(' ').indexOf(name) !== -1;
  }
  return false;
}

function Element(tag, attrs) {
  var self = this;
  this.tagName = tag.toUpperCase();
  this.attributes = {};
  for (var k in attrs) this.attributes[k] = String(attrs[k]);
  this.type = this.attributes.type || '';
  this.value = this.attributes.value || '';
  this.checked = 'checked' in this.attributes;
  this.children = [];
  this.parentNode = null;
  this.style = {};
  this.hidden = false;
  this.textContent = '';
  this.offsetWidth = 0;
  this.animations = [];
  this.classes = [];
  this.listeners = {};
  this.classList = {
    add: function(c) { if (self.classes.indexOf(c) === -1) self.classes.push(c); },
    remove: function(c) { var i = self.classes.indexOf(c); if (i !== -1) self.classes.splice(i, 1); },
    contains: function(c) { return self.classes.indexOf(c) !== -1; }
  };
}
Element.prototype.getAttribute = function(n) { return n in this.attributes ? this.attributes[n] : null; };
Element.prototype.hasAttribute = function(n) { return n in this.attributes; };
Element.prototype.setAttribute = function(n, v) { this.attributes[n] = String(v); };
Element.prototype.appendChild = function(c) { c.parentNode = this; this.children.push(c); return c; };
Element.prototype.remove = function() {
  if (!this.parentNode) return;
  var siblings = this.parentNode.children;
  siblings.splice(siblings.indexOf(this), 1);
  this.parentNode = null;
};
Element.prototype.closest = function(sel) {
  for (var el = this; el; el = el.parentNode) { if (matches(el, sel)) return el; }
  return null;
};
Element.prototype.addEventListener = function(t, fn) { (this.listeners[t] = this.listeners[t] || []).push(fn); };
Element.prototype.removeEventListener = function(t, fn) {
  var list = this.listeners[t] || [];
  var i = list.indexOf(fn);
  if (i !== -1) list.splice(i, 1);
};
Element.prototype.animate = function(keyframes, options) { this.animations.push({ keyframes: keyframes, options: options }); };
Element.prototype.focus = function() { document.activeElement = this; };

function descendants(root, out) {
  root.children.forEach(function(c) { out.push(c); descendants(c, out); });
  return out;
}

var document = {
  body: new Element('body', {}),
  activeElement: null,
  listeners: {},
  dispatched: [],
  querySelectorAll: function(sel) { return descendants(this.body, []).filter(function(el) { return matches(el, sel); }); },
  querySelector: function(sel) { return this.querySelectorAll(sel)[0] || null; },
  createElement: function(tag) { return new Element(tag, {}); },
  addEventListener: function(t, fn) { (this.listeners[t] = this.listeners[t] || []).push(fn); },
  dispatchEvent: function(evt) {
    this.dispatched.push({ type: evt.type, source: evt.detail && evt.detail.source ? evt.detail.source.getAttribute('data-core-id') : null });
  }
};

function CustomEvent(type, init) { this.type = type; this.detail = init ? init.detail : undefined; }

var observers = [];
function IntersectionObserver(callback, options) {
  this.callback = callback;
  this.options = options;
  this.observed = [];
  observers.push(this);
}
IntersectionObserver.prototype.observe = function(el) { this.observed.push(el); };
IntersectionObserver.prototype.unobserve = function(el) {
  var i = this.observed.indexOf(el);
  if (i !== -1) this.observed.splice(i, 1);
};

function build(spec, parent) {
  var el = new Element(spec.tag, spec.attrs);
  el.textContent = spec.text || '';
  parent.appendChild(el);
  spec.children.forEach(function(child) { build(child, el); });
  return el;
}

function byCoreId(id) { return document.querySelector('[data-core-id="' + id + '"]'); }

function fire(type, target) {
  var ev = { type: type, target: target, defaultPrevented: false,
    preventDefault: function() { this.defaultPrevented = true; } };
  (document.listeners[type] || []).forEach(function(fn) { fn(ev); });
  return ev;
}
"""


class _PageBody(HTMLParser):
    """Rebuilds the compiled body as a nested tree and collects inline scripts."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.children: list[dict[str, Any]] = []
        self.scripts: dict[str, str] = {}
        self._stack: list[dict[str, Any]] = []
        self._in_body = False
        self._script: str | None = None

    def handle_starttag(self, tag, attrs):
        attr_map = {name: "" if value is None else value for name, value in attrs}
        if tag == "script":
            self._script = attr_map.get("id", "")
            self.scripts[self._script] = ""
            return
        if tag == "body":
            self._in_body = True
            return
        if not self._in_body:
            return
        node = {"tag": tag, "attrs": attr_map, "text": "", "children": []}
        (self._stack[-1]["children"] if self._stack else self.children).append(node)
        if tag not in VOID_ELEMENTS:
            self._stack.append(node)

    def handle_endtag(self, tag):
        if tag == "script":
            self._script = None
        elif tag == "body":
            self._in_body = False
        elif self._stack and self._stack[-1]["tag"] == tag:
            self._stack.pop()

    def handle_data(self, data):
        if self._script is not None:
            self.scripts[self._script] += data
        elif self._stack:
            self._stack[-1]["text"] += data


def _page(*children: dict[str, Any], state: dict[str, Any] | None = None) -> dict[str, Any]:
    props = {"state": state} if state else None
    return {"version": "1.0", "app": {"id": "app", "type": "App", "props": props, "children": list(children)}}


def _run_page(document: dict[str, Any], scenario: str, tmp_path) -> Any:
    """Compile ``document``, load its runtime into the stub DOM and run ``scenario``.

    The scenario assigns ``result``, which comes back decoded from JSON.
    """
    body = _PageBody()
    body.feed(compile_document(document, "none"))
    body.close()
    assert "core-runtime" in body.scripts, "page was compiled without the runtime"

    source = "\n".join(
        [
            _STUB_DOM,
            f"var tree = {json.dumps(body.children)};",
            "tree.forEach(function(spec) { build(spec, document.body); });",
            body.scripts.get("core-state-init", ""),
            body.scripts["core-runtime"],
            "var result;",
            scenario,
            "console.log(JSON.stringify(result));",
        ]
    )
    script = tmp_path / "page.js"
    script.write_text(source, encoding="utf-8")
    proc = subprocess.run([NODE, str(script)], capture_output=True, text=True, timeout=60)
    assert proc.returncode == 0, proc.stderr
    return json.loads(proc.stdout.strip().splitlines()[-1])


def _button(node_id: str, *bindings: dict[str, Any]) -> dict[str, Any]:
    return {"id": node_id, "type": "Button", "text": node_id, "events": list(bindings)}


def _on_click(*effects: dict[str, Any], when: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    binding: dict[str, Any] = {"event": "click", "do": list(effects)}
    if when:
        binding["when"] = when
    return binding


@requires_node
class TestRuntimeBehaviour:
    """Runs compiled pages against the embedded runtime."""

    @pytest.mark.integration
    def test_click_sets_state_and_updates_bound_text(self, tmp_path):
        """A click writes state and the bound element shows the new value."""
        doc = _page(
            _button("b1", _on_click({"type": "setState", "key": "clicked", "value": True})),
            {"id": "out", "type": "Text", "props": {"bind": "clicked"}},
            state={"clicked": False},
        )
        result = _run_page(
            doc,
            "var before = byCoreId('out').textContent;"
            "fire('click', byCoreId('b1'));"
            "result = { before: before, state: window.__coreState, text: byCoreId('out').textContent };",
            tmp_path,
        )
        assert result == {"before": "false", "state": {"clicked": True}, "text": "true"}

    @pytest.mark.integration
    def test_condition_operators(self, tmp_path):
        """Each operator gates its effects as its name says."""
        checks = [
            ("gt_hit", "n", "gt", 3),
            ("gt_miss", "n", "gt", 7),
            ("lt_hit", "n", "lt", 7),
            ("lt_miss", "n", "lt", 3),
            ("gte_hit", "n", "gte", 5),
            ("lte_hit", "n", "lte", 5),
            ("eq_hit", "n", "eq", 5),
            ("neq_miss", "n", "neq", 5),
            ("contains_array_hit", "tags", "contains", "b"),
            ("contains_array_miss", "tags", "contains", "z"),
            ("contains_string_hit", "name", "contains", "ell"),
            ("truthy_hit", "name", "truthy", None),
            ("truthy_miss", "flag", "truthy", None),
            ("falsy_hit", "flag", "falsy", None),
        ]
        bindings = [
            _on_click(
                {"type": "setState", "key": f"hits.{label}", "value": True},
                when=[{"key": key, "op": op, "value": value}],
            )
            for label, key, op, value in checks
        ]
        bindings.append(_on_click({"type": "setState", "key": "hits.always", "value": True}))
        doc = _page(
            _button("b1", *bindings),
            state={"n": 5, "tags": ["a", "b"], "name": "hello", "flag": False},
        )
        hits = _run_page(doc, "fire('click', byCoreId('b1')); result = window.__coreState.hits;", tmp_path)
        assert set(hits) == {label for label, *_ in checks if label.endswith("_hit")} | {"always"}

    @pytest.mark.integration
    def test_dotted_set_state_creates_levels(self, tmp_path):
        """Writing a dotted key builds the missing objects."""
        doc = _page(
            _button("b1", _on_click({"type": "setState", "key": "form.user.name", "value": "Ada"})),
            {"id": "out", "type": "Text", "props": {"bind": "form.user.name"}},
        )
        result = _run_page(
            doc,
            "fire('click', byCoreId('b1'));"
            "result = { state: window.__coreState, text: byCoreId('out').textContent };",
            tmp_path,
        )
        assert result == {"state": {"form": {"user": {"name": "Ada"}}}, "text": "Ada"}

    @pytest.mark.integration
    def test_append_state_array(self, tmp_path):
        """Appends extend existing arrays and start missing ones."""
        doc = _page(
            _button(
                "b1",
                _on_click(
                    {"type": "appendStateArray", "key": "items", "value": "x"},
                    {"type": "appendStateArray", "key": "fresh", "value": 1},
                ),
            ),
            state={"items": ["a"]},
        )
        state = _run_page(
            doc,
            "fire('click', byCoreId('b1')); fire('click', byCoreId('b1')); result = window.__coreState;",
            tmp_path,
        )
        assert state == {"items": ["a", "x", "x"], "fresh": [1, 1]}

    @pytest.mark.integration
    def test_toggle_target(self, tmp_path):
        """toggleTarget hides a visible target and shows it again."""
        doc = _page(
            _button("b1", _on_click({"type": "toggleTarget", "target": "panel"})),
            {"id": "panel", "type": "Box", "text": "Panel"},
        )
        result = _run_page(
            doc,
            "var panel = byCoreId('panel'); var seen = [];"
            "fire('click', byCoreId('b1')); seen.push(panel.style.display);"
            "fire('click', byCoreId('b1')); seen.push(panel.style.display);"
            "result = seen;",
            tmp_path,
        )
        assert result == ["none", ""]

    @pytest.mark.integration
    def test_show_follows_state(self, tmp_path):
        """data-core-show hides the element while its key is falsy."""
        doc = _page(
            _button("b1", _on_click({"type": "setState", "key": "open", "value": True})),
            {"id": "panel", "type": "Box", "props": {"show": "open"}, "text": "Panel"},
            state={"open": False},
        )
        result = _run_page(
            doc,
            "var panel = byCoreId('panel'); var before = panel.style.display;"
            "fire('click', byCoreId('b1'));"
            "result = [before, panel.style.display];",
            tmp_path,
        )
        assert result == ["none", ""]

    @pytest.mark.integration
    def test_two_way_binding_and_submit(self, tmp_path):
        """Controls write back to state and a handled submit is prevented."""
        doc = _page(
            {
                "id": "f",
                "type": "Form",
                "events": [{"event": "submit", "do": [{"type": "setState", "key": "sent", "value": True}]}],
                "children": [
                    {"id": "email", "type": "Input", "props": {"bind": "email"}},
                    {"id": "agree", "type": "Checkbox", "props": {"bind": "agree"}, "text": "Agree"},
                ],
            },
            state={"email": "", "agree": False},
        )
        result = _run_page(
            doc,
            "var email = byCoreId('email'); email.value = 'ada@example.com'; fire('input', email);"
            "var box = document.querySelector('[data-core-bind=\"agree\"]'); box.checked = true; fire('change', box);"
            "var ev = fire('submit', byCoreId('f'));"
            "result = { state: window.__coreState, prevented: ev.defaultPrevented };",
            tmp_path,
        )
        assert result == {
            "state": {"email": "ada@example.com", "agree": True, "sent": True},
            "prevented": True,
        }

    @pytest.mark.integration
    def test_unhandled_submit_not_prevented(self, tmp_path):
        """A submit whose conditions fail keeps its default action."""
        doc = _page(
            {
                "id": "f",
                "type": "Form",
                "events": [
                    {
                        "event": "submit",
                        "when": [{"key": "ready", "op": "truthy"}],
                        "do": [{"type": "setState", "key": "sent", "value": True}],
                    }
                ],
            },
            state={"ready": False},
        )
        result = _run_page(doc, "result = fire('submit', byCoreId('f')).defaultPrevented;", tmp_path)
        assert result is False

    @pytest.mark.integration
    def test_hover_runs_only_on_bound_element(self, tmp_path):
        """Pointer entry on the bound element runs hover bindings, children do not."""
        doc = _page(
            {
                "id": "card",
                "type": "Card",
                "events": [{"event": "hover", "do": [{"type": "appendStateArray", "key": "hovers", "value": 1}]}],
                "children": [{"id": "inner", "type": "Text", "text": "Inside"}],
            },
        )
        result = _run_page(
            doc,
            "fire('pointerenter', byCoreId('inner')); fire('pointerenter', byCoreId('card'));"
            "result = window.__coreState.hovers;",
            tmp_path,
        )
        assert result == [1]

    @pytest.mark.integration
    def test_emit_and_focus(self, tmp_path):
        """emit dispatches a named event and focus moves to the target."""
        doc = _page(
            _button(
                "b1",
                _on_click(
                    {"type": "emit", "event": "cart:add"},
                    {"type": "emit"},
                    {"type": "focus", "target": "email"},
                ),
            ),
            {"id": "email", "type": "Input"},
        )
        result = _run_page(
            doc,
            "fire('click', byCoreId('b1'));"
            "result = { events: document.dispatched,"
            " focused: document.activeElement.getAttribute('data-core-id') };",
            tmp_path,
        )
        assert result == {
            "events": [{"type": "cart:add", "source": "b1"}, {"type": "core:event", "source": "b1"}],
            "focused": "email",
        }

    @pytest.mark.integration
    def test_run_animation_cleans_up(self, tmp_path):
        """runAnimation adds the preset class until the animation ends."""
        doc = _page(
            _button("b1", _on_click({"type": "runAnimation", "animation": "shake", "target": "box"})),
            {"id": "box", "type": "Box"},
        )
        result = _run_page(
            doc,
            "var box = byCoreId('box'); var seen = [];"
            "fire('click', byCoreId('b1')); seen.push(box.classList.contains('core-motion-shake'));"
            "box.listeners.animationend.slice().forEach(function(fn) { fn(); });"
            "seen.push(box.classList.contains('core-motion-shake'));"
            "result = seen;",
            tmp_path,
        )
        assert result == [True, False]

    @pytest.mark.integration
    def test_toast_lifecycle(self, tmp_path):
        """A toast is added, shown, expired and removed on its timers."""
        doc = _page(
            _button("b1", _on_click({"type": "toast", "message": "Saved", "variant": "success"})),
            {"id": "toasts", "type": "ToastRegion"},
        )
        result = _run_page(
            doc,
            "fire('click', byCoreId('b1'));"
            "var region = byCoreId('toasts'); var toast = region.children[0];"
            "var out = { cls: toast.className, text: toast.textContent, role: toast.getAttribute('role'),"
            " delays: timers.map(function(t) { return t.ms; }) };"
            "timers[0].fn(); out.shown = toast.classList.contains('core-toast--show');"
            "timers[1].fn(); out.hidden = !toast.classList.contains('core-toast--show');"
            "out.fade = timers[2].ms; timers[2].fn(); out.left = region.children.length;"
            "result = out;",
            tmp_path,
        )
        assert result == {
            "cls": "core-toast core-toast--success",
            "text": "Saved",
            "role": "status",
            "delays": [TOAST_SHOW_DELAY_MS, TOAST_LIFETIME_MS],
            "shown": True,
            "hidden": True,
            "fade": TOAST_FADE_MS,
            "left": 0,
        }

    @pytest.mark.integration
    def test_mount_motion_and_keyframes(self, tmp_path):
        """Untriggered presets play on mount and keyframes go through animate()."""
        doc = _page(
            _button("b1"),
            {"id": "hero", "type": "Box", "motion": {"mode": "preset", "preset": "fadeIn", "duration": 300}},
            {
                "id": "spin",
                "type": "Box",
                "motion": {"mode": "keyframes", "keyframes": [{"opacity": 0}, {"opacity": 1}], "duration": 500},
            },
        )
        result = _run_page(
            doc,
            "var hero = byCoreId('hero'); var spin = byCoreId('spin');"
            "result = { classes: hero.classes, duration: hero.style.animationDuration,"
            " animations: spin.animations };",
            tmp_path,
        )
        assert result["classes"] == ["core-motion-fadeIn"]
        assert result["duration"] == "300ms"
        (animation,) = result["animations"]
        assert animation["keyframes"] == [{"opacity": 0}, {"opacity": 1}]
        assert animation["options"]["duration"] == 500

    @pytest.mark.integration
    def test_visible_fires_once_and_unobserves(self, tmp_path):
        """onVisible motion waits for intersection, then stops observing."""
        doc = _page(
            _button("b1"),
            {"id": "card", "type": "Box", "motion": {"mode": "preset", "preset": "slideUp", "trigger": "onVisible"}},
        )
        result = _run_page(
            doc,
            "var card = byCoreId('card'); var io = observers[0]; var out = {};"
            "out.threshold = io.options.threshold; out.watching = io.observed.length;"
            "io.callback([{ isIntersecting: false, target: card }]);"
            "out.early = card.classList.contains('core-motion-slideUp');"
            "io.callback([{ isIntersecting: true, target: card }]);"
            "out.played = card.classList.contains('core-motion-slideUp');"
            "out.after = io.observed.length;"
            "result = out;",
            tmp_path,
        )
        assert result == {
            "threshold": VISIBLE_THRESHOLD,
            "watching": 1,
            "early": False,
            "played": True,
            "after": 0,
        }

    @pytest.mark.integration
    def test_state_motion_fires_on_each_rise(self, tmp_path):
        """onState motion plays when its key turns truthy, not while it stays so."""
        doc = _page(
            _button("b1"),
            {
                "id": "badge",
                "type": "Badge",
                "motion": {"mode": "preset", "preset": "pulse", "trigger": "onState", "stateKey": "open"},
            },
            state={"open": False},
        )
        result = _run_page(
            doc,
            "var badge = byCoreId('badge'); var rt = window.__coreRuntime; var seen = [];"
            "seen.push(badge.classList.contains('core-motion-pulse'));"
            "rt.setState('open', true); seen.push(badge.classList.contains('core-motion-pulse'));"
            "badge.classList.remove('core-motion-pulse');"
            "rt.setState('open', 'still'); seen.push(badge.classList.contains('core-motion-pulse'));"
            "rt.setState('open', false); rt.setState('open', true);"
            "seen.push(badge.classList.contains('core-motion-pulse'));"
            "result = seen;",
            tmp_path,
        )
        assert result == [False, True, False, True]

    @pytest.mark.integration
    def test_press_and_hover_motion(self, tmp_path):
        """onPress and onHover presets play on their pointer events."""
        doc = _page(
            _button("b1"),
            {
                "id": "press",
                "type": "Box",
                "motion": {"mode": "preset", "preset": "scaleIn", "trigger": "onPress"},
                "children": [{"id": "label", "type": "Text", "text": "Press"}],
            },
            {"id": "hover", "type": "Box", "motion": {"mode": "preset", "preset": "bounce", "trigger": "onHover"}},
        )
        result = _run_page(
            doc,
            "fire('pointerdown', byCoreId('label')); fire('pointerenter', byCoreId('hover'));"
            "result = [byCoreId('press').classes, byCoreId('hover').classes];",
            tmp_path,
        )
        assert result == [["core-motion-scaleIn"], ["core-motion-bounce"]]
