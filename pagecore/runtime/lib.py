"""Client runtime embedded in compiled pages.

The runtime is a single self-invoking script. It owns the page state store,
keeps bound elements in sync with it, interprets event effects through
delegated listeners, and fires motion specs on their triggers. The compiler
embeds it only when a document has events or motion, so static pages ship
no script at all.

The DOM contract between compiler and runtime is the set of ``data-core-*``
attributes defined below.
"""

# =============================================================================
# DOM contract
# =============================================================================

ATTR_ID = "data-core-id"
ATTR_EVENTS = "data-core-events"
ATTR_MOTION = "data-core-motion"
ATTR_BIND = "data-core-bind"
ATTR_SHOW = "data-core-show"
ATTR_TOAST_REGION = "data-core-toast-region"

STATE_GLOBAL = "__coreState"
RUNTIME_GLOBAL = "__coreRuntime"

# Preset animations and runAnimation effects share one class namespace so the
# compiler's preset keyframes serve both.
MOTION_CLASS_PREFIX = "core-motion-"

# Event names the delegated listeners handle besides "hover".
DELEGATED_EVENTS: tuple[str, ...] = ("click", "submit", "input", "change", "focus", "blur")

TOAST_SHOW_DELAY_MS = 10
TOAST_LIFETIME_MS = 3000
TOAST_FADE_MS = 300
VISIBLE_THRESHOLD = 0.1


_RUNTIME_TEMPLATE = r"""(function() {
  'use strict';

  var ATTR_ID = '%%ATTR_ID%%';
  var ATTR_EVENTS = '%%ATTR_EVENTS%%';
  var ATTR_MOTION = '%%ATTR_MOTION%%';
  var ATTR_BIND = '%%ATTR_BIND%%';
  var ATTR_SHOW = '%%ATTR_SHOW%%';
  var ATTR_TOAST_REGION = '%%ATTR_TOAST_REGION%%';
  var MOTION_PREFIX = '%%MOTION_CLASS_PREFIX%%';

  // ===========================================================================
  // State store
  // ===========================================================================

  window.%%STATE_GLOBAL%% = window.%%STATE_GLOBAL%% || {};

  function getState(key) {
    return String(key).split('.').reduce(function(o, k) {
      return o === undefined || o === null ? undefined : o[k];
    }, window.%%STATE_GLOBAL%%);
  }

  function setState(key, value) {
    var parts = String(key).split('.');
    var obj = window.%%STATE_GLOBAL%%;
    for (var i = 0; i < parts.length - 1; i++) {
      if (obj[parts[i]] === null || typeof obj[parts[i]] !== 'object') obj[parts[i]] = {};
      obj = obj[parts[i]];
    }
    obj[parts[parts.length - 1]] = value;
    syncDOM();
  }

  function byId(id) {
    var escaped = window.CSS && CSS.escape ? CSS.escape(id) : String(id).replace(/"/g, '\\"');
    return document.querySelector('[' + ATTR_ID + '="' + escaped + '"]');
  }

  function readJson(el, attr) {
    try { return JSON.parse(el.getAttribute(attr)); }
    catch (e) { return null; }
  }

  // ===========================================================================
  // DOM sync
  // ===========================================================================

  function isControl(el) {
    return el.tagName === 'INPUT' || el.tagName === 'SELECT' || el.tagName === 'TEXTAREA';
  }

  function syncDOM() {
    document.querySelectorAll('[' + ATTR_BIND + ']').forEach(function(el) {
      var val = getState(el.getAttribute(ATTR_BIND));
      if (val === undefined) return;
      if (isControl(el)) {
        if (el.type === 'checkbox' || el.type === 'radio') {
          el.checked = !!val;
        } else if (el.value !== String(val)) {
          el.value = val;
        }
      } else {
        el.textContent = String(val);
      }
    });

    document.querySelectorAll('[' + ATTR_SHOW + ']').forEach(function(el) {
      el.style.display = getState(el.getAttribute(ATTR_SHOW)) ? '' : 'none';
    });

    syncStateMotion();
  }

  // ===========================================================================
  // Condition evaluator
  // ===========================================================================

  function evaluateConditions(conditions) {
    if (!conditions || conditions.length === 0) return true;
    return conditions.every(function(c) {
      var val = getState(c.key);
      switch (c.op) {
        case 'eq': return val === c.value;
        case 'neq': return val !== c.value;
        case 'gt': return val > c.value;
        case 'lt': return val < c.value;
        case 'gte': return val >= c.value;
        case 'lte': return val <= c.value;
        case 'truthy': return !!val;
        case 'falsy': return !val;
        case 'contains':
          if (Array.isArray(val)) return val.indexOf(c.value) !== -1;
          return val !== undefined && val !== null && String(val).indexOf(String(c.value)) !== -1;
        default: return true;
      }
    });
  }

  // ===========================================================================
  // Effects interpreter
  // ===========================================================================

  function restartClass(el, cls) {
    el.classList.remove(cls);
    void el.offsetWidth;
    el.classList.add(cls);
  }

  function executeEffect(effect, sourceEl) {
    switch (effect.type) {
      case 'toggleTarget': {
        var target = effect.target ? byId(effect.target) : null;
        if (target) {
          var isHidden = target.style.display === 'none' || target.hidden;
          if (isHidden) { target.style.display = ''; target.hidden = false; }
          else { target.style.display = 'none'; }
        }
        break;
      }
      case 'setState':
        if (effect.key) setState(effect.key, effect.value);
        break;
      case 'appendStateArray': {
        if (effect.key) {
          var arr = getState(effect.key);
          if (!Array.isArray(arr)) arr = [];
          setState(effect.key, arr.concat([effect.value]));
        }
        break;
      }
      case 'fetchJson': {
        if (effect.url) {
          var method = (effect.method || 'GET').toUpperCase();
          var opts = { method: method };
          if (effect.body !== undefined && method !== 'GET') {
            opts.headers = { 'Content-Type': 'application/json' };
            opts.body = JSON.stringify(effect.body);
          }
          fetch(effect.url, opts)
            .then(function(r) { return r.json(); })
            .then(function(data) { if (effect.resultKey) setState(effect.resultKey, data); })
            .catch(function(err) { console.error('pagecore fetchJson error:', err); });
        }
        break;
      }
      case 'emit': {
        var eventName = effect.event || 'core:event';
        document.dispatchEvent(new CustomEvent(eventName, { detail: { source: sourceEl } }));
        break;
      }
      case 'runAnimation': {
        var animTarget = effect.target ? byId(effect.target) : sourceEl;
        if (animTarget && effect.animation) {
          var cls = MOTION_PREFIX + effect.animation;
          animTarget.addEventListener('animationend', function handler() {
            animTarget.classList.remove(cls);
            animTarget.removeEventListener('animationend', handler);
          });
          restartClass(animTarget, cls);
        }
        break;
      }
      case 'focus': {
        var focusTarget = effect.selector ? document.querySelector(effect.selector)
          : (effect.target ? byId(effect.target) : null);
        if (focusTarget && focusTarget.focus) focusTarget.focus();
        break;
      }
      case 'toast': {
        var region = document.querySelector('[' + ATTR_TOAST_REGION + ']') || document.querySelector('.flm-toast-region');
        if (region && effect.message) {
          var toast = document.createElement('div');
          toast.className = 'core-toast core-toast--' + (effect.variant || 'info');
          toast.setAttribute('role', 'status');
          toast.textContent = effect.message;
          region.appendChild(toast);
          setTimeout(function() { toast.classList.add('core-toast--show'); }, %%TOAST_SHOW_DELAY_MS%%);
          setTimeout(function() {
            toast.classList.remove('core-toast--show');
            setTimeout(function() { toast.remove(); }, %%TOAST_FADE_MS%%);
          }, %%TOAST_LIFETIME_MS%%);
        }
        break;
      }
    }
  }

  function runBindings(el, eventName) {
    var bindings = readJson(el, ATTR_EVENTS);
    if (!Array.isArray(bindings)) return false;
    var matched = false;
    bindings.forEach(function(binding) {
      if (binding.event !== eventName) return;
      if (!evaluateConditions(binding.when)) return;
      matched = true;
      (binding.do || []).forEach(function(effect) { executeEffect(effect, el); });
    });
    return matched;
  }

  // ===========================================================================
  // Event delegation
  // ===========================================================================

  function handleCoreEvent(domEvent) {
    var origin = domEvent.target;
    if (!origin || !origin.closest) return;

    // Two-way binding: controls write their value back to state
    if ((domEvent.type === 'input' || domEvent.type === 'change') && origin.hasAttribute(ATTR_BIND)) {
      var key = origin.getAttribute(ATTR_BIND);
      if (origin.type === 'checkbox' || origin.type === 'radio') setState(key, origin.checked);
      else setState(key, origin.value);
    }

    var el = origin.closest('[' + ATTR_EVENTS + ']');
    if (!el) return;
    if (runBindings(el, domEvent.type) && domEvent.type === 'submit') {
      domEvent.preventDefault();
    }
  }

  [%%DELEGATED_EVENTS%%].forEach(function(eventType) {
    document.addEventListener(eventType, handleCoreEvent, true);
  });

  // Hover fires once per entry into the bound element itself
  document.addEventListener('pointerenter', function(e) {
    var el = e.target;
    if (!el || !el.hasAttribute) return;
    if (el.hasAttribute(ATTR_EVENTS)) runBindings(el, 'hover');
    if (el.hasAttribute(ATTR_MOTION)) triggerMotion(el, 'onHover');
  }, true);

  document.addEventListener('pointerdown', function(e) {
    var el = e.target && e.target.closest ? e.target.closest('[' + ATTR_MOTION + ']') : null;
    if (el) triggerMotion(el, 'onPress');
  }, true);

  // ===========================================================================
  // Motion
  // ===========================================================================

  function applyMotion(el, spec) {
    if (spec.mode === 'preset' && spec.preset) {
      if (spec.duration) el.style.animationDuration = spec.duration + 'ms';
      if (spec.delay) el.style.animationDelay = spec.delay + 'ms';
      if (spec.easing) el.style.animationTimingFunction = spec.easing;
      restartClass(el, MOTION_PREFIX + spec.preset);
    } else if (spec.mode === 'keyframes' && el.animate && Array.isArray(spec.keyframes)) {
      el.animate(spec.keyframes, {
        duration: spec.duration || 300,
        delay: spec.delay || 0,
        easing: spec.easing || 'ease',
        iterations: spec.iterations === 'infinite' ? Infinity : (spec.iterations || 1),
        fill: spec.fill || 'forwards'
      });
    }
  }

  function triggerMotion(el, trigger) {
    var spec = readJson(el, ATTR_MOTION);
    if (spec && spec.trigger === trigger) applyMotion(el, spec);
  }

  // onState fires on each falsy-to-truthy transition of stateKey
  var stateArmed = [];

  function syncStateMotion() {
    document.querySelectorAll('[' + ATTR_MOTION + ']').forEach(function(el) {
      var spec = readJson(el, ATTR_MOTION);
      if (!spec || spec.trigger !== 'onState' || !spec.stateKey) return;
      var active = !!getState(spec.stateKey);
      var seen = stateArmed.indexOf(el) !== -1;
      if (active && !seen) {
        stateArmed.push(el);
        applyMotion(el, spec);
      } else if (!active && seen) {
        stateArmed.splice(stateArmed.indexOf(el), 1);
      }
    });
  }

  document.querySelectorAll('[' + ATTR_MOTION + ']').forEach(function(el) {
    var spec = readJson(el, ATTR_MOTION);
    if (spec && (!spec.trigger || spec.trigger === 'onMount')) applyMotion(el, spec);
  });

  if (typeof IntersectionObserver !== 'undefined') {
    var visibleObserver = new IntersectionObserver(function(entries) {
      entries.forEach(function(entry) {
        if (!entry.isIntersecting) return;
        triggerMotion(entry.target, 'onVisible');
        visibleObserver.unobserve(entry.target);
      });
    }, { threshold: %%VISIBLE_THRESHOLD%% });

    document.querySelectorAll('[' + ATTR_MOTION + ']').forEach(function(el) {
      var spec = readJson(el, ATTR_MOTION);
      if (spec && spec.trigger === 'onVisible') visibleObserver.observe(el);
    });
  }

  window.%%RUNTIME_GLOBAL%% = { getState: getState, setState: setState, sync: syncDOM };

  syncDOM();
})();"""


def _render_runtime() -> str:
    """Fill the script template from the module constants."""
    values = {
        "ATTR_ID": ATTR_ID,
        "ATTR_EVENTS": ATTR_EVENTS,
        "ATTR_MOTION": ATTR_MOTION,
        "ATTR_BIND": ATTR_BIND,
        "ATTR_SHOW": ATTR_SHOW,
        "ATTR_TOAST_REGION": ATTR_TOAST_REGION,
        "MOTION_CLASS_PREFIX": MOTION_CLASS_PREFIX,
        "STATE_GLOBAL": STATE_GLOBAL,
        "RUNTIME_GLOBAL": RUNTIME_GLOBAL,
        "DELEGATED_EVENTS": ", ".join(f"'{name}'" for name in DELEGATED_EVENTS),
        "TOAST_SHOW_DELAY_MS": str(TOAST_SHOW_DELAY_MS),
        "TOAST_LIFETIME_MS": str(TOAST_LIFETIME_MS),
        "TOAST_FADE_MS": str(TOAST_FADE_MS),
        "VISIBLE_THRESHOLD": str(VISIBLE_THRESHOLD),
    }
    source = _RUNTIME_TEMPLATE
    for name, value in values.items():
        source = source.replace(f"%%{name}%%", value)
    return source


_RUNTIME_JS = _render_runtime()


def get_runtime_js() -> str:
    """Return the page runtime script source.

    The script is a self-invoking function with no external dependencies.
    Embed it after the state bootstrap script so ``window.__coreState`` is
    already seeded when it runs.

    Returns:
        JavaScript source code as a string.
    """
    return _RUNTIME_JS
