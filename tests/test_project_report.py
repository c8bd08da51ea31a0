from unittest.mock import Mock

import pytest

from cruisedash.errors import MissingSpecifierError, ProjectNotFoundError, ReservedContextKeyError
from cruisedash.mvc import (
    Action,
    ConfigurableNamedAction,
    CruiseRequest,
    HtmlFragmentResponse,
    Request,
    Response,
)
from cruisedash.plugins import BuildPlugin, Contribution, PluginFilterPolicy
from cruisedash.plugins.latest_build import LatestBuildReportProjectPlugin
from cruisedash.plugins.project_report import ProjectReportProjectPlugin
from cruisedash.services import FarmService, GeneralAbsoluteLink, LinkFactory
from cruisedash.specifiers import BuildSpecifier, ExternalLink, ProjectSpecifier
from cruisedash.views import ViewGenerator


class StubNamedAction(Action):
    def __init__(self, fragment: str = "test"):
        self.fragment = fragment

    def execute(self, request: Request) -> Response:
        return HtmlFragmentResponse(self.fragment)


class StubPlugin(BuildPlugin):
    def __init__(self, fragment: str = "test", displayed: bool = True):
        self.fragment = fragment
        self.displayed = displayed

    def is_displayed_for_project(self, project):
        return self.displayed

    @property
    def link_description(self):
        return "Test Plugin"

    @property
    def named_actions(self):
        act = ConfigurableNamedAction()
        act.action = StubNamedAction(self.fragment)
        return [act]


class KeyPlugin(BuildPlugin):
    def __init__(self, key, value):
        self.key = key
        self.value = value

    @property
    def plugin_id(self):
        return f"key:{self.key}"

    def is_displayed_for_project(self, project):
        return True

    @property
    def link_description(self):
        return "Key Plugin"

    @property
    def named_actions(self):
        return []

    def contributions(self, request):
        yield Contribution(self.plugin_id, self.key, self.value)


@pytest.fixture
def project():
    return ProjectSpecifier.of("myServer", "myProject")


@pytest.fixture
def links():
    return [ExternalLink("foo", "bar")]


@pytest.fixture
def collaborators(project, links):
    farm = Mock(spec=FarmService)
    farm.get_most_recent_build_specifiers.return_value = [BuildSpecifier(project, "myBuild")]
    farm.get_external_links.return_value = links
    link_factory = Mock(spec=LinkFactory)
    link_factory.create_project_link.return_value = GeneralAbsoluteLink("foo", "buildUrl")
    views = Mock(spec=ViewGenerator)
    views.generate_view.return_value = HtmlFragmentResponse("myView")
    return farm, views, link_factory


def _request():
    return CruiseRequest(server_name="myServer", project_name="myProject")


def _rendered_context(views):
    views.generate_view.assert_called_once()
    template, context = views.generate_view.call_args.args
    assert template == "ProjectReport"
    return context


def test_gets_project_details_and_uses_report_template(collaborators, project, links):
    farm, views, link_factory = collaborators
    plugin = ProjectReportProjectPlugin(farm, views, link_factory)
    plugin.dash_plugins = None

    response = plugin.execute(_request())

    assert response == HtmlFragmentResponse("myView")
    farm.get_most_recent_build_specifiers.assert_called_once_with(project, 1)
    farm.get_external_links.assert_called_once_with(project)
    link_factory.create_project_link.assert_called_once_with(
        project, LatestBuildReportProjectPlugin.ACTION_NAME
    )
    views.generate_view.assert_called_once_with(
        "ProjectReport",
        {
            "projectName": "myProject",
            "externalLinks": links,
            "noLogsAvailable": False,
            "mostRecentBuildUrl": "buildUrl",
        },
    )


def test_marks_no_logs_when_server_returns_no_builds(collaborators, links):
    farm, views, link_factory = collaborators
    farm.get_most_recent_build_specifiers.return_value = []
    plugin = ProjectReportProjectPlugin(farm, views, link_factory)

    plugin.execute(_request())

    link_factory.create_project_link.assert_not_called()
    context = _rendered_context(views)
    assert context == {"projectName": "myProject", "externalLinks": links, "noLogsAvailable": True}
    assert "mostRecentBuildUrl" not in context


def test_external_links_are_passed_through_unchanged(collaborators):
    farm, views, link_factory = collaborators
    empty = []
    farm.get_external_links.return_value = empty
    ProjectReportProjectPlugin(farm, views, link_factory).execute(_request())
    assert _rendered_context(views)["externalLinks"] is empty


def test_sub_report_plugin_contributes_plugin_info(collaborators, links):
    farm, views, link_factory = collaborators
    plugin = ProjectReportProjectPlugin(farm, views, link_factory, dash_plugins=[StubPlugin()])
    assert isinstance(plugin.dash_plugins[0], BuildPlugin)

    plugin.execute(_request())

    assert _rendered_context(views) == {
        "projectName": "myProject",
        "externalLinks": links,
        "noLogsAvailable": False,
        "mostRecentBuildUrl": "buildUrl",
        "pluginInfo": "test",
    }


def test_later_plugins_overwrite_earlier_contributions(collaborators):
    farm, views, link_factory = collaborators
    dash_plugins = [StubPlugin("first"), KeyPlugin("badge", "green"), StubPlugin("second")]
    ProjectReportProjectPlugin(farm, views, link_factory, dash_plugins=dash_plugins).execute(_request())
    context = _rendered_context(views)
    assert context["pluginInfo"] == "second"
    assert context["badge"] == "green"


def test_empty_plugin_list_keeps_base_keys_only(collaborators):
    farm, views, link_factory = collaborators
    ProjectReportProjectPlugin(farm, views, link_factory, dash_plugins=[]).execute(_request())
    assert set(_rendered_context(views)) == {
        "projectName",
        "externalLinks",
        "noLogsAvailable",
        "mostRecentBuildUrl",
    }


@pytest.mark.parametrize("key", ["projectName", "externalLinks", "noLogsAvailable", "mostRecentBuildUrl"])
def test_plugins_cannot_overwrite_base_keys(collaborators, key):
    farm, views, link_factory = collaborators
    plugin = ProjectReportProjectPlugin(
        farm, views, link_factory, dash_plugins=[KeyPlugin(key, "hijacked")]
    )
    with pytest.raises(ReservedContextKeyError) as excinfo:
        plugin.execute(_request())
    assert excinfo.value.key == key
    views.generate_view.assert_not_called()


def test_displayed_policy_skips_hidden_plugins(collaborators):
    farm, views, link_factory = collaborators
    dash_plugins = [StubPlugin("shown"), StubPlugin("hidden", displayed=False)]
    plugin = ProjectReportProjectPlugin(
        farm,
        views,
        link_factory,
        dash_plugins=dash_plugins,
        filter_policy=PluginFilterPolicy.DISPLAYED,
    )
    plugin.execute(_request())
    assert _rendered_context(views)["pluginInfo"] == "shown"


def test_all_policy_ignores_display_predicate(collaborators):
    farm, views, link_factory = collaborators
    dash_plugins = [StubPlugin("hidden", displayed=False)]
    ProjectReportProjectPlugin(farm, views, link_factory, dash_plugins=dash_plugins).execute(_request())
    assert _rendered_context(views)["pluginInfo"] == "hidden"


def test_missing_project_specifier_propagates(collaborators):
    farm, views, link_factory = collaborators
    plugin = ProjectReportProjectPlugin(farm, views, link_factory)
    with pytest.raises(MissingSpecifierError):
        plugin.execute(CruiseRequest())
    farm.get_most_recent_build_specifiers.assert_not_called()


def test_collaborator_failures_propagate(collaborators):
    farm, views, link_factory = collaborators
    farm.get_external_links.side_effect = ProjectNotFoundError("gone")
    plugin = ProjectReportProjectPlugin(farm, views, link_factory)
    with pytest.raises(ProjectNotFoundError):
        plugin.execute(_request())
    views.generate_view.assert_not_called()


def test_plugin_failure_propagates(collaborators):
    farm, views, link_factory = collaborators

    class Exploding(StubPlugin):
        def contributions(self, request):
            raise ValueError("boom")

    plugin = ProjectReportProjectPlugin(farm, views, link_factory, dash_plugins=[Exploding()])
    with pytest.raises(ValueError, match="boom"):
        plugin.execute(_request())


def test_mock_plugin_named_action_response(collaborators):
    farm, views, link_factory = collaborators
    plugin = StubPlugin()
    response = plugin.named_actions[0].action.execute(_request())

    assert isinstance(response, HtmlFragmentResponse)
    assert response.response_fragment == HtmlFragmentResponse("test").response_fragment
    farm.get_most_recent_build_specifiers.assert_not_called()
    link_factory.create_project_link.assert_not_called()


def test_report_plugin_exposes_its_own_named_action(collaborators):
    farm, views, link_factory = collaborators
    plugin = ProjectReportProjectPlugin(farm, views, link_factory)
    [named] = plugin.named_actions
    assert named.action_name == ProjectReportProjectPlugin.ACTION_NAME
    assert named.action.execute(_request()) == HtmlFragmentResponse("myView")
