"""Error kinds raised by discovery, resolution and story rendering."""

from __future__ import annotations

from pathlib import Path


class SandboxError(RuntimeError):
    """Base class for storybox failures."""


class DirectoryWalkFailure(SandboxError):
    """The components directory itself could not be walked. Fatal at startup."""

    def __init__(self, path: Path | str, cause: BaseException | None = None) -> None:
        self.path = str(path)
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot walk components directory {self.path}{detail}")


class FileReadFailure(SandboxError):
    """A single story source file could not be read."""

    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Cannot read story file {self.path}: {cause}")


class FileParseIncomplete(SandboxError):
    """A story source file was read but one of its declarations could not be delimited."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Incomplete parse of {self.path}: {reason}")


class ComponentNotFound(SandboxError):
    """The requested component is not in the registry."""

    status_code = 404

    def __init__(self, name: str, redirect_url: str = "/") -> None:
        self.name = name
        self.redirect_url = redirect_url
        super().__init__(f"Component not found: {name}")


class StoryNotFound(SandboxError):
    """The requested story key does not exist for the component."""

    status_code = 404

    def __init__(self, component: str, story_key: str, redirect_url: str) -> None:
        self.component = component
        self.story_key = story_key
        self.redirect_url = redirect_url
        super().__init__(f"Story {story_key!r} not found in component {component!r}")


class InvalidRenderMode(SandboxError):
    """A content request named a render mode other than csr or ssr."""

    status_code = 400

    def __init__(self, mode: str | None) -> None:
        self.mode = mode
        super().__init__(f"Invalid or missing renderMode: {mode!r}")


class ServerTemplateUnavailable(SandboxError):
    """Server rendering was requested but the story has no usable server template."""

    status_code = 404

    def __init__(self, component: str, story_key: str, reason: str) -> None:
        self.component = component
        self.story_key = story_key
        self.reason = reason
        super().__init__(f"Cannot server-render {component}/{story_key}: {reason}")


class TemplateExecutionFailure(SandboxError):
    """A server template raised while rendering a story."""

    status_code = 500

    def __init__(self, component: str, story_key: str, cause: BaseException) -> None:
        self.component = component
        self.story_key = story_key
        self.cause = cause
        super().__init__(f"Template for {component}/{story_key} failed: {cause}")


__all__ = [
    "ComponentNotFound",
    "DirectoryWalkFailure",
    "FileParseIncomplete",
    "FileReadFailure",
    "InvalidRenderMode",
    "SandboxError",
    "ServerTemplateUnavailable",
    "StoryNotFound",
    "TemplateExecutionFailure",
]
