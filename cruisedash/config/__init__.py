from .schema import DashboardConfig, PluginsConfig, load_config

__all__ = ["DashboardConfig", "PluginsConfig", "load_config"]
