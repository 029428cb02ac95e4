"""In-memory registries for resolver tests."""

from __future__ import annotations

from typing import Iterable, Set, Tuple

from storybox.models import ArgumentSpec, ArgValue, ComponentGroup, Registry, StoryVariant


def spec(name: str, value: ArgValue) -> ArgumentSpec:
    return ArgumentSpec(name=name, type=value.type, default=value, default_text=value.as_text())


class FakeTemplates:
    """Story template lookup answering from a fixed set of (component, story) pairs."""

    def __init__(self, blocks: Iterable[Tuple[str, str]] = ()) -> None:
        self.blocks: Set[Tuple[str, str]] = set(blocks)

    def has_story(self, component: str, story_key: str) -> bool:
        return (component, story_key) in self.blocks


def build_registry() -> Registry:
    """``button`` renders on the server (only ``Primary`` has a block), ``card`` in the browser only, ``bare`` has no stories."""
    button_args = {
        "label": spec("label", ArgValue.string("Click")),
        "disabled": spec("disabled", ArgValue.boolean(False)),
    }
    button = ComponentGroup(
        name="button",
        title="Button",
        path="components/button/button.stories.js",
        stories=(
            StoryVariant(key="Primary", title="Primary", args=button_args, has_ssr=True),
            StoryVariant(key="Secondary", title="Secondary", args=button_args, has_ssr=True),
        ),
        can_ssr=True,
        story_template_path="components/button/button.stories.jinja",
        component_template_path="components/button/button.jinja",
    )
    card = ComponentGroup(
        name="card",
        title="Card",
        path="components/card/card.stories.js",
        stories=(StoryVariant(key="Basic", title="Basic", args={"heading": spec("heading", ArgValue.string("Hi"))}),),
    )
    bare = ComponentGroup(name="bare", title="Bare", path="components/bare/bare.stories.js", stories=())
    return Registry.from_components([button, card, bare])


def build_templates() -> FakeTemplates:
    return FakeTemplates([("button", "Primary")])


__all__ = ["FakeTemplates", "build_registry", "build_templates", "spec"]
