"""Ordered registry of the editable components of one document view."""

from collections.abc import Iterator, Mapping
from typing import Any

from .model import Component, ComponentId


class ComponentRegistry:
    """
    Maps component id -> component for a single document view.

    Order is explicit: ``_order`` records ids by first registration and
    defines block order in the assembled document. Overwriting an id keeps
    its position; unregistering drops it.
    """

    def __init__(self) -> None:
        self._components: dict[ComponentId, Component] = {}
        self._order: list[ComponentId] = []

    def register(self, component: Component | Mapping[str, Any]) -> Component:
        comp = Component.from_data(component)
        if comp.id not in self._components:
            self._order.append(comp.id)
        self._components[comp.id] = comp
        return comp

    def unregister(self, id: ComponentId) -> None:
        if self._components.pop(id, None) is not None:
            self._order.remove(id)

    def get(self, id: ComponentId) -> Component | None:
        return self._components.get(id)

    def update(self, id: ComponentId, content: str) -> Component:
        comp = self._components[id]
        comp.content = content
        return comp

    def get_by_prefix(self, prefix: str) -> list[Component]:
        """Components whose id contains ``prefix``, in registry order."""
        return [self._components[cid] for cid in self._order if prefix in cid]

    def dump(self) -> dict[ComponentId, str]:
        return {cid: self._components[cid].content for cid in self._order}

    def __contains__(self, id: object) -> bool:
        return id in self._components

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Component]:
        return (self._components[cid] for cid in self._order)
