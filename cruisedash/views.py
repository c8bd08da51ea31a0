"""View generation: render a named template against a rendering context."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Union

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .errors import ViewRenderError
from .mvc import HtmlFragmentResponse, Response

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


class ViewGenerator:
    def generate_view(self, template_name: str, context: Mapping[str, Any]) -> Response:
        raise NotImplementedError


class JinjaViewGenerator(ViewGenerator):
    """Renders templates from one or more directories with Jinja2.

    Directories are searched in order, so a site can shadow the bundled
    ``ProjectReport.html`` by listing its own directory first. Template
    identifiers without an extension get ``template_suffix`` appended.
    """

    def __init__(
        self,
        template_dirs: Optional[Sequence[Union[str, Path]]] = None,
        template_suffix: str = ".html",
    ):
        self.template_suffix = template_suffix
        dirs: List[Path] = [Path(d) for d in (template_dirs or [])]
        if DEFAULT_TEMPLATES_DIR not in dirs:
            dirs.append(DEFAULT_TEMPLATES_DIR)
        self.template_dirs = dirs
        self.jinja_env = Environment(
            loader=FileSystemLoader([str(d) for d in dirs]),
            autoescape=select_autoescape(["html", "htm", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def resolve_template_name(self, template_name: str) -> str:
        if Path(template_name).suffix:
            return template_name
        return f"{template_name}{self.template_suffix}"

    def generate_view(self, template_name: str, context: Mapping[str, Any]) -> Response:
        template_name = self.resolve_template_name(template_name)
        logger.debug("Rendering %s with keys %s", template_name, sorted(context))
        try:
            template = self.jinja_env.get_template(template_name)
            rendered = template.render(**context)
        except TemplateError as exc:
            raise ViewRenderError(f"Failed to render template '{template_name}': {exc}") from exc
        return HtmlFragmentResponse(rendered)


__all__ = ["ViewGenerator", "JinjaViewGenerator", "DEFAULT_TEMPLATES_DIR"]
