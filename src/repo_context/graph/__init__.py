"""Reference graph package."""

from .builder import PathResolver, build_reference_graph
from .models import ReferenceGraph

__all__ = ["PathResolver", "ReferenceGraph", "build_reference_graph"]
