"""Exception hierarchy shared by the dashboard components."""

from __future__ import annotations


class DashboardError(RuntimeError):
    """Base class for failures raised by cruisedash itself."""


class MissingSpecifierError(DashboardError):
    """Raised when a request carries no project (or build) context."""


class ProjectNotFoundError(DashboardError):
    """Raised by a farm service that does not know the requested project."""


class UnknownActionError(DashboardError):
    """Raised when no plugin exposes a named action with the given name."""


class ReservedContextKeyError(DashboardError):
    """Raised when a plugin tries to contribute one of the base report keys."""

    def __init__(self, plugin_id: str, key: str):
        super().__init__(f"Plugin '{plugin_id}' may not contribute reserved key '{key}'")
        self.plugin_id = plugin_id
        self.key = key


class ViewRenderError(DashboardError):
    """Raised when a template cannot be loaded or rendered."""


__all__ = [
    "DashboardError",
    "MissingSpecifierError",
    "ProjectNotFoundError",
    "UnknownActionError",
    "ReservedContextKeyError",
    "ViewRenderError",
]
