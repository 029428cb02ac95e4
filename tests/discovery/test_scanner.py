"""Story discovery tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from storybox.discovery import discover_stories, parse_stories, title_from_name
from storybox.errors import DirectoryWalkFailure, FileParseIncomplete
from storybox.models import ArgumentType, ArgValue

from tests._fixtures.story_builder import StoryTreeBuilder

BUTTON_STORIES = """
export default { title: "Fancy Button" };

export const Primary = {
  title: "Primary button",
  args: { label: "Click", disabled: true, size: 2 },
};

export const WithIcon = {
  args: { label: "Go" },
};
"""


def test_parse_stories_reads_each_export() -> None:
    stories = parse_stories(BUTTON_STORIES)

    assert [story.key for story in stories] == ["Primary", "WithIcon"]
    primary, with_icon = stories
    assert primary.title == "Primary button"
    assert with_icon.title == "WithIcon"
    assert primary.defaults()["label"] == ArgValue.string("Click")
    assert primary.defaults()["disabled"] == ArgValue.boolean(True)
    assert primary.defaults()["size"] == ArgValue.number(2)
    assert "size" not in with_icon.args


def test_square_flag_follows_the_story_key() -> None:
    primary, with_icon = parse_stories(BUTTON_STORIES)

    assert primary.args["isSquare"].default == ArgValue.boolean(False)
    assert with_icon.args["isSquare"].default == ArgValue.boolean(True)
    assert with_icon.args["isSquare"].type is ArgumentType.BOOLEAN


def test_explicit_square_flag_is_kept() -> None:
    (story,) = parse_stories('export const BigIcon = { args: { isSquare: false } };')

    assert story.args["isSquare"].default == ArgValue.boolean(False)


def test_title_inside_args_is_not_the_story_title() -> None:
    (story,) = parse_stories('export const Card = { args: { title: "Inner" } };')

    assert story.title == "Card"
    assert story.args["title"].default == ArgValue.string("Inner")


def test_pending_text_applies_to_every_story_in_the_file() -> None:
    content = """
    export const Loading = { args: { pendingText: "Please wait" } };
    export const Ready = { args: { label: "Done" } };
    export const Custom = { args: { pendingText: "Hold on" } };
    """
    loading, ready, custom = parse_stories(content)

    assert ready.args["pendingText"].default == ArgValue.string("Please wait")
    assert custom.args["pendingText"].default == ArgValue.string("Hold on")
    assert all(story.has_pending_text for story in (loading, ready, custom))


def test_server_flag_is_the_component_flag() -> None:
    stories = parse_stories(BUTTON_STORIES, can_ssr=True)
    assert all(story.has_ssr and story.has_csr for story in stories)

    stories = parse_stories(BUTTON_STORIES, can_ssr=False)
    assert not any(story.has_ssr for story in stories)


def test_unterminated_story_body_raises() -> None:
    with pytest.raises(FileParseIncomplete):
        parse_stories('export const Broken = {\n  args: { label: "x" },\n', source="broken.stories.js")


def test_nested_braces_in_strings_do_not_end_the_story() -> None:
    content = 'export const Braces = { args: { label: "a } b" }, title: "After" };'
    (story,) = parse_stories(content)

    assert story.title == "After"
    assert story.args["label"].default == ArgValue.string("a } b")


def test_title_from_name() -> None:
    assert title_from_name("icon-button") == "Icon Button"
    assert title_from_name("card") == "Card"


def test_scan_builds_registry(sample_tree: StoryTreeBuilder) -> None:
    result = sample_tree.scan()
    registry = result.registry

    assert registry.names() == ["button", "card"]
    button = registry.get("button")
    card = registry.get("card")
    assert button is not None and card is not None
    assert button.title == "Button"
    assert button.can_ssr is True
    assert button.path == "components/button/button.stories.js"
    assert button.story_template_path == "components/button/button.stories.jinja"
    assert card.title == "Card"
    assert card.can_ssr is False
    assert card.story("Basic").args["body"].type is ArgumentType.MARKUP
    assert result.base_dir == sample_tree.path().resolve() / "static"
    assert result.warnings == []


def test_server_capable_story_implies_server_capable_component(sample_tree: StoryTreeBuilder) -> None:
    for component in sample_tree.scan().registry:
        for story in component.stories:
            assert not story.has_ssr or component.can_ssr


def test_one_template_file_is_not_enough(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/badge/badge.stories.js": 'export const Plain = { args: { text: "x" } };',
            "static/components/badge/badge.stories.jinja": "{% block Plain %}x{% endblock %}",
        }
    )
    badge = story_tree.scan().registry.get("badge")

    assert badge is not None
    assert badge.can_ssr is False
    assert badge.story("Plain").has_ssr is False


def test_component_without_stories_is_dropped(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/empty/empty.stories.js": "export default { title: 'Empty' };",
            "static/components/card/card.stories.js": 'export const Basic = { args: {} };',
        }
    )

    assert story_tree.scan().registry.names() == ["card"]


def test_malformed_file_is_skipped_with_warning(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/broken/broken.stories.js": "export const Oops = {\n  args: {\n",
            "static/components/card/card.stories.js": 'export const Basic = { args: { a: 1 } };',
        }
    )
    result = story_tree.scan()

    assert result.registry.names() == ["card"]
    assert len(result.warnings) == 1
    assert result.warnings[0].kind == "FileParseIncomplete"
    assert result.warnings[0].path.endswith("broken.stories.js")


def test_duplicate_component_names_keep_the_first(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/a/button.stories.js": "export const First = { args: {} };",
            "static/components/b/button.stories.js": "export const Second = { args: {} };",
        }
    )
    result = story_tree.scan()

    assert [story.key for story in result.registry.get("button").stories] == ["First"]
    assert [warning.kind for warning in result.warnings] == ["DuplicateComponent"]


def test_excluded_directories_are_not_walked(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/node_modules/lib/lib.stories.js": "export const Hidden = { args: {} };",
            "static/components/card/card.stories.js": "export const Basic = { args: {} };",
        }
    )

    assert story_tree.scan().registry.names() == ["card"]


def test_other_extensions_are_ignored(story_tree: StoryTreeBuilder) -> None:
    story_tree.write(
        {
            "static/components/card/card.stories.md": "export const Doc = { args: {} };",
            "static/components/card/card.stories.ts": "export const Typed = { args: {} };",
        }
    )

    card = story_tree.scan().registry.get("card")
    assert card is not None
    assert [story.key for story in card.stories] == ["Typed"]


def test_missing_root_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(DirectoryWalkFailure):
        discover_stories(tmp_path / "does-not-exist")


def test_root_that_is_a_file_is_fatal(tmp_path: Path) -> None:
    target = tmp_path / "components"
    target.write_text("", encoding="utf-8")

    with pytest.raises(DirectoryWalkFailure):
        discover_stories(target)


def test_commented_out_exports_are_ignored() -> None:
    content = """
    // export const Draft = {
    /* export const Old = {
         args: { label: "old" },
    */
    export const Primary = { args: { label: "Go" } };
    """
    (story,) = parse_stories(content)

    assert story.key == "Primary"
    assert story.args["label"].default == ArgValue.string("Go")


def test_comment_markers_inside_strings_are_kept() -> None:
    (story,) = parse_stories('export const Link = { args: { href: "http://example.com/a" } };')

    assert story.args["href"].default == ArgValue.string("http://example.com/a")


def test_nested_arg_objects_do_not_leak_into_the_story() -> None:
    (story,) = parse_stories('export const Styled = { args: { label: "Go", style: { color: "red" } } };')

    assert "color" not in story.args
    assert "label" in story.args


def test_unreadable_file_is_skipped_with_warning(story_tree: StoryTreeBuilder) -> None:
    story_tree.write({"static/components/card/card.stories.js": "export const Basic = { args: {} };"})
    broken = story_tree.components_dir() / "broken" / "broken.stories.js"
    broken.parent.mkdir(parents=True)
    broken.write_bytes(b"export const Bad = { args: { label: \"\xff\xfe\" } };")

    result = story_tree.scan()

    assert result.registry.names() == ["card"]
    assert len(result.warnings) == 1
    assert result.warnings[0].kind == "FileReadFailure"
    assert result.warnings[0].path.endswith("broken.stories.js")
