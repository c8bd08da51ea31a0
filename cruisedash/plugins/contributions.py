"""Folding plugin contributions into a rendering context."""

from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, Iterable, NamedTuple

from ..errors import ReservedContextKeyError

logger = logging.getLogger(__name__)

PROJECT_NAME = "projectName"
EXTERNAL_LINKS = "externalLinks"
NO_LOGS_AVAILABLE = "noLogsAvailable"
MOST_RECENT_BUILD_URL = "mostRecentBuildUrl"
PLUGIN_INFO = "pluginInfo"

RESERVED_KEYS: FrozenSet[str] = frozenset(
    {PROJECT_NAME, EXTERNAL_LINKS, NO_LOGS_AVAILABLE, MOST_RECENT_BUILD_URL}
)


class Contribution(NamedTuple):
    plugin_id: str
    key: str
    value: Any


def fold_contributions(
    context: Dict[str, Any],
    contributions: Iterable[Contribution],
    reserved: FrozenSet[str] = RESERVED_KEYS,
) -> Dict[str, Any]:
    """Apply ``contributions`` to ``context`` in order and return it.

    Later contributions win over earlier ones for the same key. Reserved keys
    are never written; trying to raises :class:`ReservedContextKeyError`.
    """
    owners: Dict[str, str] = {}
    for contribution in contributions:
        if contribution.key in reserved:
            raise ReservedContextKeyError(contribution.plugin_id, contribution.key)
        previous = owners.get(contribution.key)
        if previous is not None:
            logger.debug(
                "Plugin '%s' overwrites key '%s' contributed by '%s'",
                contribution.plugin_id,
                contribution.key,
                previous,
            )
        context[contribution.key] = contribution.value
        owners[contribution.key] = contribution.plugin_id
    return context


__all__ = [
    "Contribution",
    "fold_contributions",
    "RESERVED_KEYS",
    "PROJECT_NAME",
    "EXTERNAL_LINKS",
    "NO_LOGS_AVAILABLE",
    "MOST_RECENT_BUILD_URL",
    "PLUGIN_INFO",
]
