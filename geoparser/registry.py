"""
Component registry for the geoparser.

Provides pluggable registration for document loaders, gazetteer
backends and resolution strategies. The spaCy resolver component is a
spaCy factory (see spacy_components/).
"""

from typing import Any, Callable, Dict, TypeVar

T = TypeVar("T")


class ComponentRegistry:
    """Simple registry to keep components pluggable."""

    def __init__(self, kind: str = "Component") -> None:
        self.kind = kind
        self._registry: Dict[str, Callable[..., Any]] = {}

    def register(self, name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
        def decorator(factory: Callable[..., T]) -> Callable[..., T]:
            if name in self._registry:
                raise ValueError(f"{self.kind} '{name}' already registered.")
            self._registry[name] = factory
            return factory

        return decorator

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._registry[name]
        except KeyError as exc:
            raise KeyError(f"{self.kind} '{name}' not found.") from exc

    def available(self) -> Dict[str, Callable[..., Any]]:
        return dict(self._registry)


# Registries for all pluggable parts
loaders = ComponentRegistry("Loader")
gazetteers = ComponentRegistry("Gazetteer")
strategies = ComponentRegistry("Strategy")
