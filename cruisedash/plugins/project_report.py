"""The project report: latest build, external links and plugin contributions."""

from __future__ import annotations

import logging
from itertools import chain
from typing import Any, Dict, List, Optional, Sequence

from ..mvc import Action, ConfigurableNamedAction, NamedAction, Request, Response
from ..services import FarmService, LinkFactory
from ..specifiers import ProjectSpecifier
from ..views import ViewGenerator
from .base import BuildPlugin, PluginFilterPolicy, ProjectPlugin, select_plugins
from .contributions import (
    EXTERNAL_LINKS,
    MOST_RECENT_BUILD_URL,
    NO_LOGS_AVAILABLE,
    PROJECT_NAME,
    fold_contributions,
)
from .latest_build import LatestBuildReportProjectPlugin

logger = logging.getLogger(__name__)


class ProjectReportProjectPlugin(ProjectPlugin, Action):
    """Renders the project report page.

    ``dash_plugins`` is normally passed to the constructor; hosts that wire
    plugins after construction may assign the attribute instead. ``None``
    means no plugins are attached, which is distinct from an empty list only
    in that nothing is iterated.
    """

    ACTION_NAME = "ViewProjectReport"
    TEMPLATE_NAME = "ProjectReport"

    def __init__(
        self,
        farm_service: FarmService,
        view_generator: ViewGenerator,
        link_factory: LinkFactory,
        dash_plugins: Optional[Sequence[BuildPlugin]] = None,
        filter_policy: PluginFilterPolicy = PluginFilterPolicy.ALL,
    ):
        self.farm_service = farm_service
        self.view_generator = view_generator
        self.link_factory = link_factory
        self.dash_plugins = dash_plugins
        self.filter_policy = filter_policy

    @property
    def link_description(self) -> str:
        return "Project Report"

    @property
    def named_actions(self) -> List[NamedAction]:
        return [ConfigurableNamedAction(self.ACTION_NAME, self)]

    def execute(self, request: Request) -> Response:
        project = request.project_specifier
        context = self.build_context(project)
        if self.dash_plugins is not None:
            plugins = select_plugins(self.dash_plugins, project, self.filter_policy)
            fold_contributions(context, chain.from_iterable(p.contributions(request) for p in plugins))
        return self.view_generator.generate_view(self.TEMPLATE_NAME, context)

    def build_context(self, project: ProjectSpecifier) -> Dict[str, Any]:
        context: Dict[str, Any] = {}
        builds = self.farm_service.get_most_recent_build_specifiers(project, 1)
        if builds:
            logger.debug("Most recent build for %s is %s", project, builds[0])
            context[NO_LOGS_AVAILABLE] = False
            link = self.link_factory.create_project_link(
                project, LatestBuildReportProjectPlugin.ACTION_NAME
            )
            context[MOST_RECENT_BUILD_URL] = link.url
        else:
            logger.debug("No builds recorded for %s", project)
            context[NO_LOGS_AVAILABLE] = True
        context[EXTERNAL_LINKS] = self.farm_service.get_external_links(project)
        context[PROJECT_NAME] = project.project_name
        return context


__all__ = ["ProjectReportProjectPlugin"]
