from __future__ import annotations

from pathlib import Path

import pytest

from tests._fixtures.story_builder import StoryTreeBuilder


@pytest.fixture
def story_tree(tmp_path: Path) -> StoryTreeBuilder:
    """Provide a reusable component tree builder rooted at the pytest tmp_path."""
    return StoryTreeBuilder(tmp_path)


@pytest.fixture
def sample_tree(story_tree: StoryTreeBuilder) -> StoryTreeBuilder:
    """A project with a server-capable button and a browser-only card."""
    story_tree.write_sample()
    return story_tree
