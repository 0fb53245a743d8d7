#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/promptmark/components/registry.py
"""Tag to component registry.

Components register themselves with the :func:`register_component` class
decorator. Lookups are case-insensitive and treat ``-`` and ``_`` the same,
so ``<output-format>``, ``<OutputFormat>`` and ``<output_format>`` resolve to
one component when the aliases are registered.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional

from promptmark.exceptions import ComponentRegistryError

if TYPE_CHECKING:
    from promptmark.components.base import Component

logger = logging.getLogger(__name__)


def normalize_tag(tag: str) -> str:
    """Normalize a tag name for registry lookups."""
    return tag.strip().lower().replace("_", "-")


class ComponentRegistry:
    """Mapping from tag names to component classes.

    Attributes
    ----------
    _components : dict
        Normalized tag name to component class

    Examples
    --------
        >>> from promptmark.components.base import Component
        >>> reg = ComponentRegistry()
        >>> class Shout(Component):
        ...     def render(self):
        ...         return self.render_body().upper()
        >>> reg.register(Shout, "shout")
        >>> reg.get("SHOUT") is Shout
        True

    """

    def __init__(self) -> None:
        """Create an empty registry."""
        self._components: Dict[str, type[Component]] = {}

    def register(self, component_class: type, *tags: str) -> None:
        """Register a component class under one or more tags.

        Raises
        ------
        ComponentRegistryError
            If the class is not a Component subclass, if no tag is given, or
            if a tag is already bound to another class

        """
        from promptmark.components.base import Component

        if not isinstance(component_class, type) or not issubclass(component_class, Component):
            raise ComponentRegistryError(f"{component_class!r} is not a Component subclass")
        if not tags:
            raise ComponentRegistryError(f"No tag given for {component_class.__name__}")

        for tag in tags:
            key = normalize_tag(tag)
            existing = self._components.get(key)
            if existing is not None and existing is not component_class:
                raise ComponentRegistryError(
                    f"Tag '{tag}' is already registered to {existing.__name__}",
                    tag=tag,
                )
            self._components[key] = component_class
            logger.debug("Registered component %s for <%s>", component_class.__name__, key)

    def unregister(self, tag: str) -> bool:
        """Remove a tag. Returns True if it was registered."""
        return self._components.pop(normalize_tag(tag), None) is not None

    def get(self, tag: str) -> Optional[type[Component]]:
        """Return the component class for a tag, or None."""
        key = normalize_tag(tag)
        component_class = self._components.get(key)
        if component_class is None and "-" not in key:
            # CamelCase aliases such as OutputFormat
            component_class = self._compact_lookup(key)
        return component_class

    def list_tags(self) -> list[str]:
        """Return every registered tag, sorted."""
        return sorted(self._components)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and self.get(tag) is not None

    def _compact_lookup(self, key: str) -> Optional[type[Component]]:
        for registered, component_class in self._components.items():
            if registered.replace("-", "") == key:
                return component_class
        return None


registry = ComponentRegistry()


def register_component(*tags: str) -> Callable[[type], type]:
    """Class decorator registering a component with the global registry.

    Examples
    --------
        >>> @register_component("shout")
        ... class ShoutComponent(Component):
        ...     def render(self):
        ...         return self.render_body().upper()

    """

    def decorator(component_class: type) -> type:
        registry.register(component_class, *tags)
        return component_class

    return decorator
