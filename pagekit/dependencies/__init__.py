"""Dependency models, materialization and rendering."""

from .materialize import DependencyMaterializer, materialize
from .models import Dependency, DependencyFile, DependencySource, dedupe_dependencies
from .render import DEFAULT_PREFERENCE, render_dependencies

__all__ = [
    "DEFAULT_PREFERENCE",
    "Dependency",
    "DependencyFile",
    "DependencyMaterializer",
    "DependencySource",
    "dedupe_dependencies",
    "materialize",
    "render_dependencies",
]
