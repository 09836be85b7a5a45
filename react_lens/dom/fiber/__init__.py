"""
React fiber inspection: hook installation, graph export, traversal and safe serialization.
"""

from .graph import FiberGraph, load_fiber_graph
from .hook import HookInstaller, RegistrationTable
from .resolver import AncestorLookup, nearest_authored_ancestor, owner_chain
from .serializer import serialize
from .views import (
	ComponentDescriptor,
	Fiber,
	FiberKind,
	RenderRoot,
)
from .walker import FiberTreeWalker

__all__ = [
	'AncestorLookup',
	'ComponentDescriptor',
	'Fiber',
	'FiberGraph',
	'FiberKind',
	'FiberTreeWalker',
	'HookInstaller',
	'RegistrationTable',
	'RenderRoot',
	'load_fiber_graph',
	'nearest_authored_ancestor',
	'owner_chain',
	'serialize',
]
