import logging
from collections.abc import Sequence

from typing_extensions import TypedDict

from react_lens.dom.a11y.views import AccessibilityNode, AccessibilitySnapshot
from react_lens.dom.component_map.views import AccessibilityInfo, ComponentMapResponse, CorrelatedNode
from react_lens.dom.fiber.naming import display_name, extract_source, props_summary
from react_lens.dom.fiber.serializer import serialize
from react_lens.dom.fiber.views import ComponentDescriptor, Fiber, FiberKind, HostInstance, RenderRoot
from react_lens.dom.fiber.walker import ROOT_PATH, component_id, first_host_instance

logger = logging.getLogger(__name__)

STATE_DEPTH = 1


class StatsMapProcessor(TypedDict):
	total_nodes: int
	component_nodes: int
	correlated_nodes: int


class ComponentMapProcessor:
	"""Merges an accessibility snapshot with the fiber trees of every root."""

	def build(
		self,
		snapshot: AccessibilitySnapshot,
		roots: Sequence[RenderRoot],
		include_state: bool = False,
	) -> ComponentMapResponse:
		ax_by_backend_id = snapshot.index_by_backend_id()

		stats: StatsMapProcessor = {
			'total_nodes': 0,
			'component_nodes': 0,
			'correlated_nodes': 0,
		}

		document = CorrelatedNode(
			backend_node_id=snapshot.root.backend_dom_node_id,
			accessibility=AccessibilityInfo.from_node(snapshot.root),
		)

		# identity-based; a fiber reachable twice contributes once
		processed: set[int] = set()

		for root in roots:
			if root.current is None:
				continue
			stack: list[tuple[Fiber, str, CorrelatedNode]] = [(root.current, ROOT_PATH, document)]
			while stack:
				fiber, path, parent = stack.pop()
				if id(fiber) in processed:
					continue
				processed.add(id(fiber))

				node = self._convert_fiber(fiber, root, path, ax_by_backend_id, include_state)
				if node is not None:
					parent.children.append(node)
					stats['total_nodes'] += 1
					if node.component is not None:
						stats['component_nodes'] += 1
					if node.accessibility is not None:
						stats['correlated_nodes'] += 1
					parent = node

				children = fiber.children()
				for index in range(len(children) - 1, -1, -1):
					stack.append((children[index], f'{path}.{index}', parent))

		logger.debug(
			f'Component map: {stats["component_nodes"]} components, '
			f'{stats["correlated_nodes"]} correlated of {stats["total_nodes"]} nodes'
		)
		return ComponentMapResponse(
			root=document,
			snapshot_id=snapshot.snapshot_id,
			total_nodes=stats['total_nodes'],
			component_nodes=stats['component_nodes'],
			correlated_nodes=stats['correlated_nodes'],
			metadata={'roots': [root.root_id for root in roots], 'include_state': include_state},
		)

	def _convert_fiber(
		self,
		fiber: Fiber,
		root: RenderRoot,
		path: str,
		ax_by_backend_id: dict[int, AccessibilityNode],
		include_state: bool,
	) -> CorrelatedNode | None:
		"""Component node for authored fibers, host node for hosts in the snapshot, else None."""
		kind = fiber.kind

		if kind.is_authored:
			host = first_host_instance(fiber)
			backend_id = host.backend_node_id if host else None
			ax_node = ax_by_backend_id.get(backend_id) if backend_id is not None else None
			state = None
			if include_state and fiber.memoized_state is not None:
				state = serialize(fiber.memoized_state, STATE_DEPTH)
			return CorrelatedNode(
				backend_node_id=backend_id,
				accessibility=AccessibilityInfo.from_node(ax_node) if ax_node else None,
				component=ComponentDescriptor(
					id=component_id(root, path),
					name=display_name(fiber),
					type=kind,
					key=fiber.key,
					state=state,
					source=extract_source(fiber),
					path=path,
					backend_node_id=backend_id,
				),
				props_summary=props_summary(fiber.memoized_props),
			)

		if kind == FiberKind.HOST and isinstance(fiber.state_node, HostInstance):
			backend_id = fiber.state_node.backend_node_id
			ax_node = ax_by_backend_id.get(backend_id) if backend_id is not None else None
			if ax_node is None:
				return None
			return CorrelatedNode(backend_node_id=backend_id, accessibility=AccessibilityInfo.from_node(ax_node))

		return None
