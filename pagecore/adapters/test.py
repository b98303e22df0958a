"""Unit tests for the adapters module.

Tests for:
- CoreAdapter abstract base class
- Adapter registry (register_adapter, get_adapter, list_adapters)
- Shared token resolution in TokenStyleAdapter
"""

import pytest

from pagecore.adapters import (
    AdapterAssets,
    CoreAdapter,
    ResolvedTag,
    TokenStyleAdapter,
    attr_value,
    get_adapter,
    list_adapters,
)
from pagecore.ir import StyleTokens


class TestCoreAdapterContract:
    """Tests for CoreAdapter abstract base class contract."""

    @pytest.mark.unit
    def test_core_adapter_is_abstract(self):
        """CoreAdapter cannot be instantiated directly."""
        with pytest.raises(TypeError, match="abstract"):
            CoreAdapter()  # type: ignore

    @pytest.mark.unit
    def test_concrete_adapter_requires_assets(self):
        """Concrete adapters must implement assets."""

        class Incomplete(TokenStyleAdapter):
            @property
            def name(self) -> str:
                return "incomplete"

            def resolve_tag(self, node_type, props):
                return ResolvedTag("div")

        with pytest.raises(TypeError, match="abstract"):
            Incomplete()


class TestRegistry:
    """Tests for adapter lookup."""

    @pytest.mark.unit
    def test_builtin_adapters_listed(self):
        """Both built-in adapters are registered."""
        assert list_adapters() == ["fluentlm", "none"]

    @pytest.mark.unit
    def test_get_adapter_returns_instance(self):
        """Lookup instantiates the adapter."""
        adapter = get_adapter("none")
        assert isinstance(adapter, CoreAdapter)
        assert adapter.name == "none"

    @pytest.mark.unit
    def test_unknown_adapter(self):
        """Unknown names raise KeyError listing the alternatives."""
        with pytest.raises(KeyError, match="Available: fluentlm, none"):
            get_adapter("bootstrap")


class TestAttrValue:
    """Tests for attribute value rendering."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value, expected",
        [(True, "true"), (False, "false"), (3, "3"), (3.0, "3"), (0.5, "0.5"), ("x", "x")],
    )
    def test_rendering(self, value, expected):
        """Values render the way JSON would print them."""
        assert attr_value(value) == expected


class _TableAdapter(TokenStyleAdapter):
    SPACE_MAP = {"sm": "S", "md": "M"}
    RADIUS_MAP = {"md": "R"}
    SHADOW_MAP = {"sm": "SH"}
    COLOR_MAP = {"primary": "P", "surface": "SURF"}
    TYPOGRAPHY_MAP = {"code": ("F", "W", "L"), "overline": ("F2", "W2", "L2")}

    @property
    def name(self) -> str:
        return "table"

    def resolve_tag(self, node_type, props):
        return ResolvedTag("div")

    def assets(self):
        return AdapterAssets()


class TestTokenStyleAdapter:
    """Tests for shared token resolution."""

    @pytest.mark.unit
    def test_scalar_space(self):
        """A scalar space token sets padding."""
        assert _TableAdapter().resolve_style(StyleTokens(space="md")) == {"padding": "M"}

    @pytest.mark.unit
    def test_sides_override_axes(self):
        """Edge values win over axis values."""
        css = _TableAdapter().resolve_style(
            StyleTokens.model_validate({"space": {"x": "sm", "left": "md"}})
        )
        assert css == {"padding-left": "M", "padding-right": "S"}

    @pytest.mark.unit
    def test_bg_falls_back_to_color_map(self):
        """Without a background table, colors come from COLOR_MAP."""
        css = _TableAdapter().resolve_style(StyleTokens(bg="surface", color="primary"))
        assert css == {"color": "P", "background-color": "SURF"}

    @pytest.mark.unit
    def test_border_defaults(self):
        """Border width and style default to 1px solid."""
        css = _TableAdapter().resolve_style(StyleTokens.model_validate({"border": {}}))
        assert css == {"border": "1px solid currentColor"}
        css = _TableAdapter().resolve_style(
            StyleTokens.model_validate({"border": {"width": 2, "style": "dashed", "color": "primary"}})
        )
        assert css == {"border": "2px dashed P"}

    @pytest.mark.unit
    def test_typography_extras(self):
        """code gets a monospace family and overline uppercases."""
        code = _TableAdapter().resolve_style(StyleTokens(typography="code"))
        assert code["font-family"] == "monospace"
        overline = _TableAdapter().resolve_style(StyleTokens(typography="overline"))
        assert overline["text-transform"] == "uppercase"
        assert overline["font-size"] == "F2"

    @pytest.mark.unit
    def test_layout_and_alignment(self):
        """hidden maps to display:none and alignment to flex keywords."""
        css = _TableAdapter().resolve_style(
            StyleTokens(layout="hidden", align="between", justify="center")
        )
        assert css == {
            "display": "none",
            "align-items": "space-between",
            "justify-content": "center",
        }

    @pytest.mark.unit
    def test_escape_fields(self):
        """Length escape fields pass through verbatim."""
        css = _TableAdapter().resolve_style(
            StyleTokens(width="50%", max_width="40rem", font_size="18px", cursor="pointer")
        )
        assert css == {
            "width": "50%",
            "max-width": "40rem",
            "font-size": "18px",
            "cursor": "pointer",
        }

    @pytest.mark.unit
    def test_opacity_and_weight(self):
        """Opacity prints like a number and weights map to numerics."""
        css = _TableAdapter().resolve_style(StyleTokens(opacity=1, font_weight="semibold"))
        assert css == {"opacity": "1", "font-weight": "600"}

    @pytest.mark.unit
    def test_unknown_keys_ignored(self):
        """Unknown token keys never reach the CSS."""
        css = _TableAdapter().resolve_style(StyleTokens.model_validate({"glow": "max"}))
        assert css == {}
