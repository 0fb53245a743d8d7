#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for the tag to component registry."""
import pytest
from utils import render

from promptmark.components import Component, ComponentRegistry, registry
from promptmark.components.instructions import OutputFormatComponent, RoleComponent
from promptmark.components.registry import normalize_tag
from promptmark.exceptions import ComponentRegistryError


class ShoutComponent(Component):
    """Upper-case the body."""

    def render(self) -> str:
        return self.render_body().upper()


@pytest.mark.unit
class TestComponentRegistry:
    """Test registration and lookup."""

    def test_register_and_get(self) -> None:
        """Test lookups are case-insensitive."""
        reg = ComponentRegistry()
        reg.register(ShoutComponent, "shout", "yell")

        assert reg.get("SHOUT") is ShoutComponent
        assert reg.get("Yell") is ShoutComponent
        assert reg.list_tags() == ["shout", "yell"]
        assert "shout" in reg
        assert 42 not in reg

    def test_unregister(self) -> None:
        """Test removing a tag."""
        reg = ComponentRegistry()
        reg.register(ShoutComponent, "shout")

        assert reg.unregister("shout") is True
        assert reg.unregister("shout") is False
        assert reg.get("shout") is None

    def test_rejects_non_components(self) -> None:
        """Test that only Component subclasses can be registered."""
        with pytest.raises(ComponentRegistryError):
            ComponentRegistry().register(dict, "dict")

    def test_rejects_missing_tag(self) -> None:
        """Test registration without a tag."""
        with pytest.raises(ComponentRegistryError):
            ComponentRegistry().register(ShoutComponent)

    def test_rejects_conflicting_tag(self) -> None:
        """Test binding one tag to two classes."""
        reg = ComponentRegistry()
        reg.register(ShoutComponent, "shout")

        with pytest.raises(ComponentRegistryError) as exc_info:
            reg.register(RoleComponent, "shout")
        assert exc_info.value.tag == "shout"

    def test_reregistering_same_class(self) -> None:
        """Test that registering a class again under its tag is allowed."""
        reg = ComponentRegistry()
        reg.register(ShoutComponent, "shout")
        reg.register(ShoutComponent, "shout")

        assert reg.list_tags() == ["shout"]

    @pytest.mark.parametrize("tag", ["output-format", "output_format", "OutputFormat", "OUTPUT-FORMAT"])
    def test_builtin_aliases(self, tag: str) -> None:
        """Test the spellings of a dashed tag."""
        assert registry.get(tag) is OutputFormatComponent

    def test_normalize_tag(self) -> None:
        """Test tag normalization."""
        assert normalize_tag(" Output_Format ") == "output-format"


@pytest.mark.unit
class TestCustomComponents:
    """Test rendering with a component added to the global registry."""

    def test_custom_component_renders(self) -> None:
        """Test dispatch to a newly registered tag."""
        registry.register(ShoutComponent, "shout")
        try:
            assert render("<shout>hey {{who}}</shout>", {"who": "you"}) == "HEY YOU"
        finally:
            registry.unregister("shout")

        assert render("<shout>hey</shout>") == "shout: hey"
