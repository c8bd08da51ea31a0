import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich import print as rprint
from rich.markup import escape

from .config import DashboardConfig, load_config
from .errors import DashboardError
from .mvc import CruiseRequest, RedirectResponse
from .plugins import BuildPlugin, PluginRegistry, ProjectPlugin, dispatch_named_action
from .plugins.latest_build import LatestBuildReportProjectPlugin
from .plugins.project_report import ProjectReportProjectPlugin
from .services import DefaultLinkFactory, YamlFarmService
from .views import JinjaViewGenerator

app = typer.Typer(help="cruisedash: CI dashboard project reports")

CONFIG_HELP = "Path to the dashboard config file"


def _load_config_or_exit(config_path: str, label: str) -> DashboardConfig:
    try:
        return load_config(config_path)
    except ValidationError as exc:
        rprint(f"[red]{label} failed:[/red] invalid config {config_path}: {escape(str(exc))}")
        raise typer.Exit(1)


def _registry(cfg: DashboardConfig, manifest: Optional[str] = None) -> PluginRegistry:
    path = manifest or cfg.plugins.manifest
    registry = PluginRegistry(manifest_path=path) if path else PluginRegistry()
    overrides = {name: o.model_dump(exclude_none=True) for name, o in cfg.plugins.overrides.items()}
    registry.apply_overrides(overrides)
    return registry


def build_project_report(
    cfg: DashboardConfig, dash_plugins: Optional[List[BuildPlugin]] = None
) -> ProjectReportProjectPlugin:
    farm = YamlFarmService(cfg.farm_file)
    links = DefaultLinkFactory(cfg.base_url)
    views = JinjaViewGenerator([cfg.templates_dir] if cfg.templates_dir else None)
    return ProjectReportProjectPlugin(
        farm,
        views,
        links,
        dash_plugins=dash_plugins,
        filter_policy=cfg.plugins.filter_policy,
    )


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command()
def report(
    server: str,
    project: str,
    config_path: str = typer.Option("./configs/dashboard.yaml", "--config-path", help=CONFIG_HELP),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write the rendered report to this path"),
):
    """Render the project report for SERVER/PROJECT."""
    cfg = _load_config_or_exit(config_path, "Report")
    dash_plugins = _registry(cfg).build_plugins()
    plugin = build_project_report(cfg, dash_plugins or None)
    try:
        response = plugin.execute(CruiseRequest(server_name=server, project_name=project))
    except DashboardError as exc:
        rprint(f"[red]Report failed:[/red] {exc}")
        raise typer.Exit(1)
    if output:
        out_path = Path(output).expanduser()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(response.body(), encoding="utf-8")
        rprint(f"[green]Report written to[/green] {out_path}")
        return
    typer.echo(response.body())


@app.command()
def action(
    server: str,
    project: str,
    action_name: str,
    config_path: str = typer.Option("./configs/dashboard.yaml", "--config-path", help=CONFIG_HELP),
):
    """Run a named action exposed by the dashboard or one of its plugins."""
    cfg = _load_config_or_exit(config_path, "Action")
    dash_plugins = _registry(cfg).build_plugins()
    report_plugin = build_project_report(cfg, dash_plugins or None)
    plugins: List[ProjectPlugin] = [
        report_plugin,
        LatestBuildReportProjectPlugin(report_plugin.farm_service, report_plugin.link_factory),
        *dash_plugins,
    ]
    request = CruiseRequest(server_name=server, project_name=project)
    try:
        response = dispatch_named_action(plugins, action_name, request)
    except DashboardError as exc:
        rprint(f"[red]Action failed:[/red] {exc}")
        raise typer.Exit(1)
    if isinstance(response, RedirectResponse):
        typer.echo(f"Redirect -> {response.url}")
        return
    typer.echo(response.body())


@app.command("plugins-list")
def plugins_list(
    manifest: Optional[str] = typer.Option(
        None,
        "--manifest",
        help="Optional path to a plugin manifest (defaults to configs/plugins.yml or $CRUISEDASH_PLUGINS_FILE).",
    ),
    enabled_only: bool = typer.Option(False, "--enabled-only", help="Only show enabled plugins."),
    show_config: bool = typer.Option(False, "--show-config", help="Include plugin config payloads."),
    config_path: str = typer.Option("./configs/dashboard.yaml", "--config-path", help=CONFIG_HELP),
):
    """List plugins declared in the dashboard manifest."""

    registry = _registry(_load_config_or_exit(config_path, "Listing plugins"), manifest)
    entries = list(registry.entries.values())
    if enabled_only:
        entries = [entry for entry in entries if entry.enabled]

    if not entries:
        rprint("[yellow]No plugins registered.[/yellow]")
        return

    for entry in entries:
        status = "[green]enabled[/green]" if entry.enabled else "[red]disabled[/red]"
        target = entry.module + (f":{entry.attribute}" if entry.attribute else "")
        rprint(f"[bold]{entry.name}[/bold] ({status}) -> {target}")
        if entry.description:
            rprint(f"  {entry.description}")
        if entry.tags:
            rprint(f"  tags: {', '.join(entry.tags)}")
        if show_config and entry.config:
            rprint(f"  config: {entry.config}")


if __name__ == "__main__":
    app()
