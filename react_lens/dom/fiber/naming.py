from collections.abc import Mapping
from typing import Any

from react_lens.dom.fiber.views import Fiber, FiberKind, RemoteFunction, SourceLocation

SOURCE_PATH_PROP = 'data-inspector-relative-path'
SOURCE_LINE_PROP = 'data-inspector-line'
SOURCE_COLUMN_PROP = 'data-inspector-column'
SOURCE_PROP_PREFIX = 'data-inspector'


def read_attr(value: Any, name: str) -> Any:
	"""Read ``name`` off a mirrored page value (object, function or fiber)."""
	if value is None:
		return None
	if isinstance(value, Mapping):
		return value.get(name)
	if isinstance(value, RemoteFunction):
		if name == 'displayName':
			return value.display_name
		if name == 'name':
			return value.name
		return value.attributes.get(name)
	return None


def type_name(value: Any) -> str | None:
	"""displayName, then name, of a component type; empty strings don't count."""
	for attr in ('displayName', 'name'):
		candidate = read_attr(value, attr)
		if isinstance(candidate, str) and candidate:
			return candidate
	return None


def display_name(fiber: Fiber | None) -> str:
	if fiber is None:
		return 'Unknown'

	explicit = read_attr(fiber.type, 'displayName')
	if isinstance(explicit, str) and explicit:
		return explicit

	kind = fiber.kind
	if kind in (FiberKind.FUNCTION_COMPONENT, FiberKind.CLASS_COMPONENT):
		return type_name(fiber.type) or type_name(fiber.element_type) or 'Anonymous'
	if kind == FiberKind.FORWARD_REF:
		return (
			type_name(read_attr(fiber.type, 'render'))
			or type_name(read_attr(fiber.element_type, 'render'))
			or 'ForwardRef'
		)
	if kind == FiberKind.MEMO_COMPONENT:
		return (
			type_name(read_attr(fiber.type, 'type'))
			# simple memo fibers carry the inner function as `type` directly
			or type_name(fiber.type)
			or type_name(read_attr(fiber.element_type, 'type'))
			or 'Memo'
		)
	if kind == FiberKind.HOST and isinstance(fiber.type, str):
		return fiber.type
	return 'Unknown'


def _parse_int(value: Any) -> int | None:
	if isinstance(value, bool):
		return None
	if isinstance(value, int):
		return value
	try:
		return int(str(value).strip(), 10)
	except (TypeError, ValueError):
		return None


def extract_source(fiber: Fiber) -> SourceLocation | None:
	"""Source location from ``data-inspector-*`` props, or None when absent."""
	props = fiber.memoized_props
	if not isinstance(props, Mapping):
		return None

	file_name = props.get(SOURCE_PATH_PROP)
	line = props.get(SOURCE_LINE_PROP)
	column = props.get(SOURCE_COLUMN_PROP)
	if not file_name and not line and not column:
		return None

	return SourceLocation(
		file_name=str(file_name) if file_name else None,
		line_number=_parse_int(line) if line else None,
		column_number=_parse_int(column) if column else None,
	)


def props_summary(props: Any, limit: int = 3) -> list[str]:
	"""Up to ``limit`` prop names, skipping internals, source markers and children."""
	if not isinstance(props, Mapping):
		return []
	keys = [
		str(key)
		for key in props
		if not str(key).startswith('__react') and not str(key).startswith(SOURCE_PROP_PREFIX) and key != 'children'
	]
	return keys[:limit]
