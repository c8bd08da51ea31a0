"""Project plugin that redirects to the newest build report."""

from __future__ import annotations

import logging
from typing import List

from ..mvc import (
    Action,
    ConfigurableNamedAction,
    HtmlFragmentResponse,
    NamedAction,
    RedirectResponse,
    Request,
    Response,
)
from ..services import FarmService, LinkFactory
from .base import ProjectPlugin

logger = logging.getLogger(__name__)

BUILD_REPORT_ACTION_NAME = "ViewBuildReport"


class LatestBuildReportAction(Action):
    def __init__(self, farm_service: FarmService, link_factory: LinkFactory):
        self.farm_service = farm_service
        self.link_factory = link_factory

    def execute(self, request: Request) -> Response:
        project = request.project_specifier
        builds = self.farm_service.get_most_recent_build_specifiers(project, 1)
        if not builds:
            logger.debug("No builds for %s; nothing to redirect to", project)
            return HtmlFragmentResponse(f"There are no complete builds for project {project.project_name}")
        link = self.link_factory.create_build_link(builds[0], BUILD_REPORT_ACTION_NAME)
        return RedirectResponse(link.url)


class LatestBuildReportProjectPlugin(ProjectPlugin):
    ACTION_NAME = "ViewLatestBuildReport"

    def __init__(self, farm_service: FarmService, link_factory: LinkFactory):
        self._action = LatestBuildReportAction(farm_service, link_factory)

    @property
    def link_description(self) -> str:
        return "Latest Build"

    @property
    def named_actions(self) -> List[NamedAction]:
        return [ConfigurableNamedAction(self.ACTION_NAME, self._action)]


__all__ = ["LatestBuildReportProjectPlugin", "LatestBuildReportAction", "BUILD_REPORT_ACTION_NAME"]
