"""Document loaders."""

from .documents import JSONLLoader, JSONLoader  # noqa: F401
