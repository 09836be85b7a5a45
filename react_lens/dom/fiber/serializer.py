from collections.abc import Mapping
from typing import Any

from react_lens.dom.fiber.views import Fiber, HostInstance, RemoteFunction, Truncated

CIRCULAR_MARKER = '[Circular]'
MAX_DEPTH_MARKER = '[Max Depth]'
ELEMENT_MARKER = '[React Element]'
DOM_NODE_MARKER = '[DOM Node]'

ELEMENT_MARKER_KEY = '$$typeof'
RESERVED_KEY_PREFIX = '__react'


def serialize(value: Any, max_depth: int, max_properties: int = 50, max_array_items: int = 100) -> Any:
	"""Convert a live object graph into JSON-safe data.

	Precedence per visited value: primitives pass through, then an already
	visited identity becomes ``[Circular]``, then an exhausted depth becomes
	``[Max Depth]``, then type dispatch (sequences, elements, DOM nodes,
	functions, mappings). A cycle found exactly at the depth limit therefore
	reports ``[Circular]``.
	"""
	return _SafeSerializer(max_properties, max_array_items).visit(value, max_depth)


def function_marker(value: Any) -> str:
	name = getattr(value, '__name__', None) or 'anonymous'
	return f'[Function: {name}]'


class _SafeSerializer:
	def __init__(self, max_properties: int, max_array_items: int):
		self.max_properties = max_properties
		self.max_array_items = max_array_items
		self.seen: set[int] = set()
		# keep visited objects alive so their ids cannot be reused mid-call
		self._pinned: list[Any] = []

	def visit(self, value: Any, depth: int) -> Any:
		if value is None or isinstance(value, (str, int, float, bool)):
			return value

		if id(value) in self.seen:
			return CIRCULAR_MARKER
		self.seen.add(id(value))
		self._pinned.append(value)

		if depth <= 0:
			return MAX_DEPTH_MARKER

		if isinstance(value, (list, tuple)):
			return [self.visit(item, depth - 1) for item in value[: self.max_array_items]]
		if isinstance(value, Mapping) and ELEMENT_MARKER_KEY in value:
			return ELEMENT_MARKER
		if isinstance(value, HostInstance):
			return DOM_NODE_MARKER
		if isinstance(value, RemoteFunction) or callable(value):
			return function_marker(value)
		if isinstance(value, Truncated):
			return MAX_DEPTH_MARKER
		if isinstance(value, Fiber):
			return f'[Fiber: {value.kind.value}]'
		if isinstance(value, Mapping):
			return self._visit_mapping(value.items(), depth)
		if isinstance(value, (set, frozenset)):
			return [self.visit(item, depth - 1) for item in list(value)[: self.max_array_items]]
		if hasattr(value, '__dict__'):
			return self._visit_mapping(vars(value).items(), depth)
		return repr(value)

	def _visit_mapping(self, items, depth: int) -> dict[str, Any]:
		result: dict[str, Any] = {}
		copied = 0
		for key, item in items:
			if copied >= self.max_properties:
				break
			copied += 1
			key = str(key)
			if key.startswith(RESERVED_KEY_PREFIX):
				continue
			result[key] = self.visit(item, depth - 1)
		return result
