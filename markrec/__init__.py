# Entrypoint for the markrec package.
# This file makes the public API available to programmers.

from __future__ import annotations

from markrec.__about__ import __version__
from markrec.api import recommend
from markrec.config import ConfigError, Settings, load_config, load_settings
from markrec.models import ItemRef, RecommendedItem, Result, SourceItem

# The __all__ variable defines the public API of the package.
__all__ = [
    "recommend",
    "load_config",
    "load_settings",
    "ConfigError",
    "Settings",
    "ItemRef",
    "RecommendedItem",
    "SourceItem",
    "Result",
    "__version__",
]
