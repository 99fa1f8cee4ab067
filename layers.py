"""
Layer abstraction for the location map.

A map frame is drawn as an ordered stack of layers (background, grid,
roads, landmark, position). Each layer draws onto a DrawingSurface from a
shared scene description, enabling plugin-style extensibility.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from drawing_surface import DrawingSurface


class Layer(ABC):
    """
    Abstract base class for map layers.

    Layers are drawn bottom to top in stack order. A hidden
    layer is skipped without being removed from its stack.

    Subclasses must implement:
        - draw(surface, scene): Draw this layer's primitives

    Example:
        class CrosshairLayer(Layer):
            def draw(self, surface, scene):
                w, h = scene.size.width, scene.size.height
                surface.line((w / 2 - 5, h / 2), (w / 2 + 5, h / 2), (0, 0, 0))

        stack.register('crosshair', CrosshairLayer())
    """

    def __init__(self, visible: bool = True):
        self._visible = visible

    @property
    def visible(self) -> bool:
        return self._visible

    @visible.setter
    def visible(self, value: bool):
        self._visible = value

    @abstractmethod
    def draw(self, surface: DrawingSurface, scene: Any) -> None:
        """
        Draw the layer.

        Args:
            surface: Target drawing surface
            scene: Frame description shared by all layers
        """
        pass


class LayerStack:
    """
    Named layers drawn bottom to top.

    Hosts add layers on top of the stack, or slot them beneath an existing
    layer so the position marker stays uppermost.

    Example:
        stack = LayerStack()
        stack.register('background', BackgroundLayer())
        stack.register('position', PositionLayer())
        stack.register('route', RouteLayer(), below='position')

        stack.draw_all(surface, scene)
    """

    def __init__(self):
        self._entries: List[Tuple[str, Layer]] = []

    @property
    def names(self) -> List[str]:
        """Layer names, bottom first."""
        return [name for name, _ in self._entries]

    def _index(self, name: str) -> Optional[int]:
        for i, (entry_name, _) in enumerate(self._entries):
            if entry_name == name:
                return i
        return None

    def register(self, name: str, layer: Layer, below: Optional[str] = None) -> None:
        """
        Add a layer on top, or directly beneath the layer named `below`.

        Re-registering an existing name swaps the layer in place and ignores
        `below`.

        Raises:
            KeyError: If `below` names no registered layer
        """
        index = self._index(name)
        if index is not None:
            self._entries[index] = (name, layer)
            return

        if below is None:
            self._entries.append((name, layer))
            return

        target = self._index(below)
        if target is None:
            raise KeyError(f"No layer named {below!r}")
        self._entries.insert(target, (name, layer))

    def unregister(self, name: str) -> Optional[Layer]:
        """Remove a layer by name; returns it, or None if not found."""
        index = self._index(name)
        if index is None:
            return None
        return self._entries.pop(index)[1]

    def get(self, name: str) -> Optional[Layer]:
        index = self._index(name)
        return None if index is None else self._entries[index][1]

    def draw_all(self, surface: DrawingSurface, scene: Any) -> None:
        """Draw visible layers bottom to top."""
        for _, layer in self._entries:
            if layer.visible:
                layer.draw(surface, scene)
