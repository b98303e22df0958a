"""Unit tests for the framework-free adapter."""

import pytest

from pagecore.adapters.none import TAG_MAP, NoneAdapter
from pagecore.ir import NODE_TYPES, StyleTokens


class TestNoneAdapterTags:
    """Tests for tag resolution."""

    @pytest.mark.unit
    def test_every_node_type_has_tag(self):
        """All node types map to a tag."""
        assert set(TAG_MAP) == NODE_TYPES

    @pytest.mark.unit
    @pytest.mark.parametrize("level, tag", [(1, "h1"), (6, "h6"), (0, "h1"), (9, "h6"), ("3", "h2")])
    def test_heading_level_clamped(self, level, tag):
        """Heading levels clamp to h1..h6 and default to h2."""
        assert NoneAdapter().resolve_tag("Heading", {"level": level}).tag == tag

    @pytest.mark.unit
    def test_layout_primitives_inline_styles(self):
        """Stack, Grid, Cluster and Spacer carry their own layout CSS."""
        adapter = NoneAdapter()
        assert adapter.resolve_tag("Stack", {}).attrs["style"] == "display:flex;flex-direction:column"
        assert (
            adapter.resolve_tag("Grid", {"columns": 3}).attrs["style"]
            == "display:grid;grid-template-columns:repeat(3, 1fr)"
        )
        assert (
            adapter.resolve_tag("Grid", {"columns": "1fr 2fr"}).attrs["style"]
            == "display:grid;grid-template-columns:1fr 2fr"
        )
        spacer = adapter.resolve_tag("Spacer", {"size": "2rem"})
        assert spacer.attrs == {"style": "height:2rem;flex-shrink:0", "aria-hidden": "true"}

    @pytest.mark.unit
    def test_input_attributes(self):
        """Input type prefers inputType and flags render bare."""
        resolved = NoneAdapter().resolve_tag(
            "Input",
            {"inputType": "email", "type": "text", "placeholder": "you@x", "required": True, "value": 0},
        )
        assert resolved.tag == "input"
        assert resolved.attrs == {
            "type": "email",
            "placeholder": "you@x",
            "value": "0",
            "required": "",
        }

    @pytest.mark.unit
    def test_button_variant(self):
        """Buttons expose their variant as a data attribute."""
        resolved = NoneAdapter().resolve_tag("Button", {"variant": "primary", "disabled": True})
        assert resolved.attrs == {"disabled": "", "data-variant": "primary"}

    @pytest.mark.unit
    def test_unknown_type_is_div(self):
        """Unknown types fall back to div."""
        assert NoneAdapter().resolve_tag("Carousel", {}).tag == "div"


class TestNoneAdapterStyle:
    """Tests for literal CSS resolution."""

    @pytest.mark.unit
    def test_literal_values(self):
        """Tokens resolve to literal CSS values."""
        css = NoneAdapter().resolve_style(
            StyleTokens(space="md", radius="full", color="primary", shadow="sm", gap="2xl")
        )
        assert css == {
            "padding": "1rem",
            "border-radius": "9999px",
            "box-shadow": "0 1px 2px rgba(0,0,0,0.05)",
            "color": "#0078d4",
            "gap": "3rem",
        }

    @pytest.mark.unit
    def test_default_border_color(self):
        """Borders without a color use the border role."""
        css = NoneAdapter().resolve_style(StyleTokens.model_validate({"border": {"width": 1}}))
        assert css == {"border": "1px solid #dee2e6"}

    @pytest.mark.unit
    def test_no_assets(self):
        """The plain adapter ships no assets."""
        assets = NoneAdapter().assets()
        assert assets.styles == []
        assert assets.scripts == []
