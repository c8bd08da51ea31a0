"""Farm service and link factory collaborators.

The farm service answers questions about builds and external links for a
project; the link factory turns a project (or build) plus an action name
into a navigable URL. Both are interfaces with one concrete implementation
each, good enough to drive the dashboard from fixture data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union
from urllib.parse import quote

import yaml

from .errors import ProjectNotFoundError
from .specifiers import BuildSpecifier, ExternalLink, ProjectSpecifier

logger = logging.getLogger(__name__)


class FarmService:
    def get_most_recent_build_specifiers(
        self, project: ProjectSpecifier, count: int
    ) -> Sequence[BuildSpecifier]:
        raise NotImplementedError

    def get_external_links(self, project: ProjectSpecifier) -> Sequence[ExternalLink]:
        raise NotImplementedError


class YamlFarmService(FarmService):
    """Farm service backed by a YAML document.

    Expected layout::

        servers:
          local:
            projects:
              myProject:
                builds: [log20240102.xml, log20240101.xml]   # newest first
                external_links:
                  - {name: Tracker, url: https://issues.example.com}
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._servers = self._load(self.path)

    def get_most_recent_build_specifiers(
        self, project: ProjectSpecifier, count: int
    ) -> List[BuildSpecifier]:
        builds = self._project(project).get("builds") or []
        return [BuildSpecifier(project, str(name)) for name in builds[: max(count, 0)]]

    def get_external_links(self, project: ProjectSpecifier) -> List[ExternalLink]:
        links: List[ExternalLink] = []
        for idx, raw in enumerate(self._project(project).get("external_links") or []):
            if not isinstance(raw, dict) or "name" not in raw or "url" not in raw:
                logger.debug("Skipping malformed external link %s for %s", idx, project)
                continue
            links.append(ExternalLink(str(raw["name"]), str(raw["url"])))
        return links

    # ------------------------------------------------------------------
    def _project(self, project: ProjectSpecifier) -> Dict[str, Any]:
        server = self._servers.get(project.server.server_name) or {}
        projects = server.get("projects") or {}
        if project.project_name not in projects:
            raise ProjectNotFoundError(f"Unknown project '{project}'")
        return projects[project.project_name] or {}

    @staticmethod
    def _load(path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.debug("Farm file %s not found; serving no projects", path)
            return {}
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        servers = raw.get("servers") if isinstance(raw, dict) else None
        return servers if isinstance(servers, dict) else {}


class Link:
    @property
    def text(self) -> str:
        raise NotImplementedError

    @property
    def url(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class GeneralAbsoluteLink(Link):
    link_text: str
    absolute_url: str

    @property
    def text(self) -> str:
        return self.link_text

    @property
    def url(self) -> str:
        return self.absolute_url


class LinkFactory:
    def create_project_link(self, project: ProjectSpecifier, action_name: str) -> Link:
        raise NotImplementedError

    def create_build_link(self, build: BuildSpecifier, action_name: str) -> Link:
        raise NotImplementedError


class DefaultLinkFactory(LinkFactory):
    """Builds ``{base}/server/{s}/project/{p}[/build/{b}]/{action}.aspx`` URLs."""

    def __init__(self, base_url: str = ""):
        self.base_url = base_url.rstrip("/")

    def create_project_link(self, project: ProjectSpecifier, action_name: str) -> Link:
        path = self._project_path(project)
        return GeneralAbsoluteLink(project.project_name, f"{path}/{quote(action_name)}.aspx")

    def create_build_link(self, build: BuildSpecifier, action_name: str) -> Link:
        path = f"{self._project_path(build.project)}/build/{quote(build.build_name, safe='')}"
        return GeneralAbsoluteLink(build.build_name, f"{path}/{quote(action_name)}.aspx")

    def _project_path(self, project: ProjectSpecifier) -> str:
        server = quote(project.server.server_name, safe="")
        name = quote(project.project_name, safe="")
        return f"{self.base_url}/server/{server}/project/{name}"


__all__ = [
    "FarmService",
    "YamlFarmService",
    "Link",
    "GeneralAbsoluteLink",
    "LinkFactory",
    "DefaultLinkFactory",
]
