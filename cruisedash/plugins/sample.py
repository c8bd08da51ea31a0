"""Reference build plugin used by the example manifest.

It contributes a static HTML note to the project report. Copy this structure
when writing a new plugin.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..mvc import (
    Action,
    ConfigurableNamedAction,
    HtmlFragmentResponse,
    NamedAction,
    Request,
    Response,
)
from ..specifiers import ProjectSpecifier
from .base import BuildPlugin


@dataclass
class NoteAction(Action):
    message: str

    def execute(self, request: Request) -> Response:
        return HtmlFragmentResponse(self.message)


@dataclass
class NotePlugin(BuildPlugin):
    """Build plugin that shows ``message`` for the listed projects (all if empty)."""

    message: str
    projects: List[str] = field(default_factory=list)
    action_name: str = "ViewProjectNote"

    def is_displayed_for_project(self, project: ProjectSpecifier) -> bool:
        return not self.projects or project.project_name in self.projects

    @property
    def link_description(self) -> str:
        return "Project Note"

    @property
    def named_actions(self) -> List[NamedAction]:
        return [ConfigurableNamedAction(self.action_name, NoteAction(self.message))]


def build_plugin(message: str = "hello from the dashboard", projects: Optional[List[str]] = None) -> NotePlugin:
    """Factory entry point referenced by the example manifest."""

    return NotePlugin(message=message, projects=list(projects or []))
