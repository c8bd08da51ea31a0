"""Build plugin capability and named-action dispatch."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Iterator, Optional, Sequence

from ..errors import UnknownActionError
from ..mvc import NamedAction, Request, Response
from ..specifiers import ProjectSpecifier
from .contributions import PLUGIN_INFO, Contribution

logger = logging.getLogger(__name__)


class PluginFilterPolicy(str, Enum):
    """Which attached plugins get to contribute to a project report."""

    ALL = "all"
    DISPLAYED = "displayed"


class ProjectPlugin:
    """Anything that exposes named actions to the dashboard host."""

    @property
    def link_description(self) -> str:
        raise NotImplementedError

    @property
    def named_actions(self) -> Sequence[NamedAction]:
        raise NotImplementedError


class BuildPlugin(ProjectPlugin):
    """A dashboard extension that is shown for some projects and exposes actions.

    Subclasses implement :meth:`is_displayed_for_project`,
    :attr:`link_description` and :attr:`named_actions`. The default
    :meth:`contributions` runs every named action against the request and
    contributes the response body under ``pluginInfo``.
    """

    @property
    def plugin_id(self) -> str:
        return type(self).__name__

    def is_displayed_for_project(self, project: ProjectSpecifier) -> bool:
        raise NotImplementedError

    def contributions(self, request: Request) -> Iterable[Contribution]:
        for named_action in self.named_actions:
            response = named_action.action.execute(request)
            yield Contribution(self.plugin_id, PLUGIN_INFO, response.body())


def select_plugins(
    plugins: Sequence[BuildPlugin],
    project: ProjectSpecifier,
    policy: PluginFilterPolicy = PluginFilterPolicy.ALL,
) -> Iterator[BuildPlugin]:
    for plugin in plugins:
        if policy is PluginFilterPolicy.DISPLAYED and not plugin.is_displayed_for_project(project):
            logger.debug("Plugin '%s' hidden for %s; skipping", plugin.plugin_id, project)
            continue
        yield plugin


def find_named_action(plugins: Sequence[ProjectPlugin], action_name: str) -> Optional[NamedAction]:
    for plugin in plugins:
        for named_action in plugin.named_actions:
            if named_action.action_name == action_name:
                return named_action
    return None


def dispatch_named_action(
    plugins: Sequence[ProjectPlugin], action_name: str, request: Request
) -> Response:
    """Execute the first named action called ``action_name`` across ``plugins``."""
    named_action = find_named_action(plugins, action_name)
    if named_action is None:
        raise UnknownActionError(f"No plugin exposes an action named '{action_name}'")
    logger.debug("Dispatching action '%s'", action_name)
    return named_action.action.execute(request)


__all__ = [
    "ProjectPlugin",
    "BuildPlugin",
    "PluginFilterPolicy",
    "select_plugins",
    "find_named_action",
    "dispatch_named_action",
]
