"""
Tests for Layer base class and LayerStack.

Tests the abstract layer pattern and the ordered stack used by the renderer.
"""

import pytest
from typing import Any

from drawing_surface import RecordingSurface
from layers import Layer, LayerStack


class MarkLayer(Layer):
    """Concrete layer for testing: writes its tag as text."""

    def __init__(self, tag: str = "mark", **kwargs):
        super().__init__(**kwargs)
        self.tag = tag
        self.draw_count = 0

    def draw(self, surface, scene: Any) -> None:
        self.draw_count += 1
        surface.text((0, 0), self.tag, (0, 0, 0))


def drawn_tags(surface):
    return [op.args["text"] for op in surface.of_kind("text")]


class TestLayer:
    """Tests for Layer base class."""

    def test_visible_default(self):
        assert MarkLayer().visible is True

    def test_visible_custom(self):
        assert MarkLayer(visible=False).visible is False

    def test_visible_setter(self):
        layer = MarkLayer()
        layer.visible = False
        assert layer.visible is False

    def test_abstract_layer_cannot_instantiate(self):
        with pytest.raises(TypeError):
            Layer()


class TestLayerStack:
    """Tests for LayerStack."""

    def test_register_layer(self):
        stack = LayerStack()
        layer = MarkLayer()
        stack.register("a", layer)

        assert stack.names == ["a"]
        assert stack.get("a") is layer

    def test_register_overwrites_in_place(self):
        """Re-registering a name keeps its position."""
        stack = LayerStack()
        stack.register("a", MarkLayer("a1"))
        stack.register("b", MarkLayer("b"))
        stack.register("a", MarkLayer("a2"), below="b")

        assert stack.names == ["a", "b"]
        assert stack.get("a").tag == "a2"

    def test_register_below(self):
        stack = LayerStack()
        stack.register("background", MarkLayer("background"))
        stack.register("position", MarkLayer("position"))
        stack.register("route", MarkLayer("route"), below="position")
        surface = RecordingSurface()

        stack.draw_all(surface, scene=None)

        assert stack.names == ["background", "route", "position"]
        assert drawn_tags(surface) == ["background", "route", "position"]

    def test_register_below_missing(self):
        stack = LayerStack()
        with pytest.raises(KeyError):
            stack.register("route", MarkLayer(), below="position")
        assert stack.names == []

    def test_unregister(self):
        stack = LayerStack()
        layer = MarkLayer()
        stack.register("a", layer)

        removed = stack.unregister("a")

        assert removed is layer
        assert stack.names == []
        assert stack.get("a") is None

    def test_unregister_missing(self):
        assert LayerStack().unregister("nope") is None

    def test_draw_all_in_order(self):
        stack = LayerStack()
        stack.register("first", MarkLayer("first"))
        stack.register("second", MarkLayer("second"))
        stack.register("third", MarkLayer("third"))
        surface = RecordingSurface()

        stack.draw_all(surface, scene=None)

        assert drawn_tags(surface) == ["first", "second", "third"]

    def test_draw_all_skips_hidden(self):
        stack = LayerStack()
        hidden = MarkLayer("hidden", visible=False)
        stack.register("shown", MarkLayer("shown"))
        stack.register("hidden", hidden)
        surface = RecordingSurface()

        stack.draw_all(surface, scene=None)

        assert drawn_tags(surface) == ["shown"]
        assert hidden.draw_count == 0

    def test_empty_stack(self):
        surface = RecordingSurface()
        LayerStack().draw_all(surface, scene=None)
        assert surface.ops == []
