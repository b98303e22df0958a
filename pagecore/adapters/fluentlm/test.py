"""Unit tests for the FluentLM adapter."""

import pytest

from pagecore.adapters.fluentlm import FluentLMAdapter
from pagecore.ir import NODE_TYPES, StyleTokens


class TestFluentLMAdapterTags:
    """Tests for component class resolution."""

    @pytest.mark.unit
    def test_name(self):
        """Adapter identifier is fluentlm."""
        assert FluentLMAdapter().name == "fluentlm"

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "variant, css_class",
        [
            ("primary", "flm-button flm-button--primary"),
            ("subtle", "flm-button flm-button--subtle"),
            ("icon", "flm-button flm-button--icon"),
            ("fancy", "flm-button"),
            (None, "flm-button"),
        ],
    )
    def test_button_variants(self, variant, css_class):
        """Known variants add a modifier class."""
        props = {"variant": variant} if variant else {}
        assert FluentLMAdapter().resolve_tag("Button", props).attrs["class"] == css_class

    @pytest.mark.unit
    def test_button_icon_and_disabled(self):
        """Icons become data attributes and disabled is bare."""
        attrs = FluentLMAdapter().resolve_tag("Button", {"icon": "Add", "disabled": True}).attrs
        assert attrs["data-icon"] == "Add"
        assert attrs["disabled"] == ""

    @pytest.mark.unit
    def test_dialog_is_modal(self):
        """Dialogs carry role and aria-modal."""
        resolved = FluentLMAdapter().resolve_tag("Dialog", {"open": True})
        assert resolved.tag == "dialog"
        assert resolved.attrs == {
            "class": "flm-dialog",
            "role": "dialog",
            "aria-modal": "true",
            "open": "",
        }

    @pytest.mark.unit
    def test_toast_region_is_live(self):
        """Toast regions announce politely."""
        attrs = FluentLMAdapter().resolve_tag("ToastRegion", {}).attrs
        assert attrs == {"class": "flm-toast-region", "aria-live": "polite"}

    @pytest.mark.unit
    def test_form_controls(self):
        """Inputs and selects carry FluentLM control classes."""
        adapter = FluentLMAdapter()
        assert adapter.resolve_tag("Input", {"name": "q"}).attrs == {
            "class": "flm-textfield-input",
            "type": "text",
            "name": "q",
        }
        assert adapter.resolve_tag("Select", {}).attrs == {"class": "flm-dropdown-select"}

    @pytest.mark.unit
    def test_every_type_resolves(self):
        """Every node type resolves to some tag."""
        adapter = FluentLMAdapter()
        for node_type in NODE_TYPES:
            assert adapter.resolve_tag(node_type, {}).tag


class TestFluentLMAdapterStyle:
    """Tests for theme variable resolution."""

    @pytest.mark.unit
    def test_theme_variables(self):
        """Tokens resolve to theme variables."""
        css = FluentLMAdapter().resolve_style(StyleTokens(space="md", radius="sm", shadow="xl"))
        assert css == {
            "padding": "var(--spacingM)",
            "border-radius": "var(--borderRadiusSmall)",
            "box-shadow": "var(--shadow16)",
        }

    @pytest.mark.unit
    def test_background_uses_tinted_surfaces(self):
        """Status backgrounds differ from status text colors."""
        css = FluentLMAdapter().resolve_style(StyleTokens(color="danger", bg="danger"))
        assert css == {"color": "var(--redText)", "background-color": "var(--redBackground)"}

    @pytest.mark.unit
    def test_code_font(self):
        """code typography uses the theme monospace family."""
        css = FluentLMAdapter().resolve_style(StyleTokens(typography="code"))
        assert css["font-family"] == "var(--fontFamilyMonospace, monospace)"


class TestFluentLMAssets:
    """Tests for asset URLs."""

    @pytest.mark.unit
    def test_default_base_url(self, monkeypatch):
        """Assets are served from /frameworks/fluentlm by default."""
        monkeypatch.delenv("PAGECORE_FLUENTLM_BASE_URL", raising=False)
        assets = FluentLMAdapter().assets()
        assert assets.styles == [
            "/frameworks/fluentlm/fluentlm.min.css",
            "/frameworks/fluentlm/theme-light.css",
        ]
        assert assets.scripts == ["/frameworks/fluentlm/fluentlm.min.js"]

    @pytest.mark.unit
    def test_configured_base_url(self, monkeypatch):
        """The base URL follows configuration."""
        monkeypatch.setenv("PAGECORE_FLUENTLM_BASE_URL", "https://cdn.example.com/flm/")
        assert FluentLMAdapter().assets().scripts == ["https://cdn.example.com/flm/fluentlm.min.js"]

    @pytest.mark.unit
    def test_explicit_base_url(self):
        """An explicit base URL wins."""
        assert FluentLMAdapter("/static").assets().styles[0] == "/static/fluentlm.min.css"
