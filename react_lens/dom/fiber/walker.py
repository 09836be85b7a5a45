import logging
from collections.abc import Iterator, Sequence
from typing import NamedTuple

from react_lens.dom.fiber.naming import display_name, extract_source, type_name
from react_lens.dom.fiber.resolver import DEFAULT_MAX_OWNERS, owner_chain
from react_lens.dom.fiber.serializer import serialize
from react_lens.dom.fiber.views import (
	ComponentDescriptor,
	ComponentSummary,
	Fiber,
	FiberKind,
	HostInstance,
	RenderRoot,
	RootInfo,
)
from react_lens.exceptions import ComponentNotFound

logger = logging.getLogger(__name__)

ROOT_PATH = '0'


class VisitedFiber(NamedTuple):
	fiber: Fiber
	path: str
	depth: int


def component_id(root: RenderRoot, path: str) -> str:
	return f'{root.root_id}:{path}'


def parse_component_id(component_id: str) -> tuple[int, int, list[int]]:
	"""Split ``renderer:root:path`` into its parts."""
	parts = component_id.split(':')
	if len(parts) != 3:
		raise ComponentNotFound(f'Malformed component id {component_id!r}', searched=component_id)
	try:
		renderer_id = int(parts[0])
		root_index = int(parts[1])
		segments = [int(segment) for segment in parts[2].split('.')]
	except ValueError as e:
		raise ComponentNotFound(f'Malformed component id {component_id!r}', searched=component_id) from e
	return renderer_id, root_index, segments


def walk(root: RenderRoot, max_depth: int | None = None) -> Iterator[VisitedFiber]:
	"""Pre-order over child/sibling links, yielding each fiber once with its path.

	Fibers deeper than ``max_depth`` are neither yielded nor descended into.
	"""
	if root.current is None:
		return

	seen: set[int] = set()
	stack: list[VisitedFiber] = [VisitedFiber(root.current, ROOT_PATH, 0)]
	while stack:
		visited = stack.pop()
		if id(visited.fiber) in seen:
			continue
		seen.add(id(visited.fiber))
		yield visited

		if max_depth is not None and visited.depth >= max_depth:
			continue
		children = visited.fiber.children()
		for index in range(len(children) - 1, -1, -1):
			stack.append(VisitedFiber(children[index], f'{visited.path}.{index}', visited.depth + 1))


def count_fibers(root: RenderRoot, limit: int) -> int:
	count = 0
	for _ in walk(root):
		count += 1
		if count >= limit:
			break
	return count


def first_host_instance(fiber: Fiber, max_nodes: int = 2000) -> HostInstance | None:
	"""The DOM node of the first host fiber at or below ``fiber``."""
	stack = [fiber]
	seen: set[int] = set()
	while stack and len(seen) < max_nodes:
		current = stack.pop()
		if id(current) in seen:
			continue
		seen.add(id(current))
		if current.kind == FiberKind.HOST and isinstance(current.state_node, HostInstance):
			return current.state_node
		stack.extend(reversed(current.children()))
	return None


class FiberTreeWalker:
	"""Lists, finds and describes components across render roots."""

	def __init__(self, roots: Sequence[RenderRoot]):
		self.roots = list(roots)

	def list_roots(self, renderer_names: dict[int, tuple[str | None, str | None]], node_limit: int) -> list[RootInfo]:
		results = []
		for root in self.roots:
			name, version = renderer_names.get(root.renderer_id, (None, None))
			element_type = root.current.element_type if root.current else None
			root_name = type_name(element_type) or 'Unknown'
			results.append(
				RootInfo(
					renderer_id=root.renderer_id,
					renderer_name=name,
					renderer_version=version,
					root_id=root.root_id,
					root_index=root.root_index,
					display_name=root_name,
					nodes=count_fibers(root, node_limit),
				)
			)
		return results

	def list_components(
		self,
		depth: int,
		max_nodes: int,
		name_filter: str | None = None,
		include_all: bool = False,
		renderer_id: int | None = None,
		root_index: int | None = None,
	) -> list[ComponentSummary]:
		"""Authored components (or every fiber with ``include_all``) in pre-order."""
		results: list[ComponentSummary] = []
		needle = name_filter.lower() if name_filter else None

		for root in self.roots:
			if renderer_id is not None and root.renderer_id != renderer_id:
				continue
			if root_index is not None and root.root_index != root_index:
				continue

			for visited in walk(root, max_depth=depth):
				if len(results) >= max_nodes:
					break
				kind = visited.fiber.kind
				if not include_all and not kind.is_authored:
					continue
				name = display_name(visited.fiber)
				if needle and needle not in name.lower():
					continue
				results.append(
					ComponentSummary(
						id=component_id(root, visited.path),
						name=name,
						type=kind,
						key=visited.fiber.key,
						depth=visited.depth,
						path=visited.path,
					)
				)

		logger.debug(f'Listed {len(results)} components from {len(self.roots)} roots')
		return results

	def find_by_id(self, component_id: str) -> tuple[RenderRoot, Fiber]:
		"""Re-walk from the matching root following the id's child indices."""
		renderer_id, root_index, segments = parse_component_id(component_id)

		root = next((r for r in self.roots if r.renderer_id == renderer_id and r.root_index == root_index), None)
		if root is None or root.current is None:
			raise ComponentNotFound(f'No root {renderer_id}:{root_index} for component {component_id}', searched=component_id)
		if segments[0] != 0:
			raise ComponentNotFound(f'Component {component_id} not found', searched=component_id)

		fiber = root.current
		for index in segments[1:]:
			children = fiber.children()
			if index < 0 or index >= len(children):
				raise ComponentNotFound(f'Component {component_id} not found', searched=component_id)
			fiber = children[index]
		return root, fiber

	def path_of(self, target: Fiber) -> tuple[RenderRoot, str] | None:
		for root in self.roots:
			for visited in walk(root):
				if visited.fiber is target:
					return root, visited.path
		return None

	def describe(
		self,
		fiber: Fiber,
		component_id: str | None = None,
		path: str | None = None,
		serialize_depth: int = 3,
		max_properties: int = 50,
		max_array_items: int = 100,
		max_owners: int = DEFAULT_MAX_OWNERS,
	) -> ComponentDescriptor:
		host = first_host_instance(fiber)
		return ComponentDescriptor(
			id=component_id or '',
			name=display_name(fiber),
			type=fiber.kind,
			key=fiber.key,
			props=serialize(fiber.memoized_props, serialize_depth, max_properties, max_array_items),
			state=serialize(fiber.memoized_state, serialize_depth, max_properties, max_array_items),
			source=extract_source(fiber),
			owners=owner_chain(fiber, max_owners),
			path=path,
			backend_node_id=host.backend_node_id if host else None,
		)
