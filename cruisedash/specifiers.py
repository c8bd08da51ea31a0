"""Value objects naming servers, projects, builds and external links."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServerSpecifier:
    server_name: str

    def __str__(self) -> str:
        return self.server_name


@dataclass(frozen=True)
class ProjectSpecifier:
    """A project within a server's namespace."""

    server: ServerSpecifier
    project_name: str

    @classmethod
    def of(cls, server_name: str, project_name: str) -> "ProjectSpecifier":
        return cls(ServerSpecifier(server_name), project_name)

    def __str__(self) -> str:
        return f"{self.server}/{self.project_name}"


@dataclass(frozen=True)
class BuildSpecifier:
    project: ProjectSpecifier
    build_name: str

    def __str__(self) -> str:
        return f"{self.project}/{self.build_name}"


@dataclass(frozen=True)
class ExternalLink:
    """Labelled URL pointing outside the dashboard (issue tracker, wiki, ...)."""

    name: str
    url: str


__all__ = ["ServerSpecifier", "ProjectSpecifier", "BuildSpecifier", "ExternalLink"]
