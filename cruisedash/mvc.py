"""Request, response and action primitives used by dashboard plugins."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from markupsafe import escape

from .errors import MissingSpecifierError
from .specifiers import ProjectSpecifier, ServerSpecifier


class Request:
    """A dashboard request scoped to (at most) one project."""

    @property
    def project_specifier(self) -> ProjectSpecifier:
        raise NotImplementedError


@dataclass
class CruiseRequest(Request):
    server_name: Optional[str] = None
    project_name: Optional[str] = None

    @property
    def project_specifier(self) -> ProjectSpecifier:
        if not self.server_name or not self.project_name:
            raise MissingSpecifierError("Request is not scoped to a project")
        return ProjectSpecifier(ServerSpecifier(self.server_name), self.project_name)


class Response:
    def body(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class HtmlFragmentResponse(Response):
    response_fragment: str

    def body(self) -> str:
        return self.response_fragment


@dataclass(frozen=True)
class RedirectResponse(Response):
    url: str

    def body(self) -> str:
        return f'<meta http-equiv="refresh" content="0; url={escape(self.url)}">'


class Action:
    def execute(self, request: Request) -> Response:
        raise NotImplementedError


class NamedAction:
    """An action exposed by a plugin under a name the host can route to."""

    @property
    def action_name(self) -> str:
        raise NotImplementedError

    @property
    def action(self) -> Action:
        raise NotImplementedError


class ConfigurableNamedAction(NamedAction):
    def __init__(self, action_name: str = "", action: Optional[Action] = None):
        self._action_name = action_name
        self._action = action

    @property
    def action_name(self) -> str:
        return self._action_name

    @action_name.setter
    def action_name(self, value: str) -> None:
        self._action_name = value

    @property
    def action(self) -> Action:
        if self._action is None:
            raise RuntimeError(f"Named action '{self._action_name}' has no action configured")
        return self._action

    @action.setter
    def action(self, value: Action) -> None:
        self._action = value


__all__ = [
    "Request",
    "CruiseRequest",
    "Response",
    "HtmlFragmentResponse",
    "RedirectResponse",
    "Action",
    "NamedAction",
    "ConfigurableNamedAction",
]
