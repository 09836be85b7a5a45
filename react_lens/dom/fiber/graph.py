import json
import logging
from typing import Any

from react_lens.cdp.channel import RuntimeChannel
from react_lens.config import InspectorProfile
from react_lens.dom.fiber.scripts import FIBER_GRAPH_DUMP, READ_HOSTS_FIELD, READ_JSON_FIELD, invoke
from react_lens.dom.fiber.views import Fiber, HookRegistration, HostInstance, RemoteFunction, RenderRoot, Truncated
from react_lens.exceptions import RuntimeEvaluationError

logger = logging.getLogger(__name__)

OBJECT_GROUP = 'react-lens-graph'


class FiberGraph:
	"""Point-in-time mirror of every registered root and the fibers under it."""

	def __init__(
		self,
		token: str | None,
		renderers: list[HookRegistration],
		roots: list[RenderRoot],
		host_instances: list[HostInstance],
	):
		self.token = token
		self.renderers = renderers
		self.roots = roots
		self.host_instances = host_instances

	def renderer(self, renderer_id: int) -> HookRegistration | None:
		for registration in self.renderers:
			if registration.id == renderer_id:
				return registration
		return None

	def find_root(self, renderer_id: int, root_index: int) -> RenderRoot | None:
		for root in self.roots:
			if root.renderer_id == renderer_id and root.root_index == root_index:
				return root
		return None

	@classmethod
	def decode(cls, payload: dict[str, Any]) -> 'FiberGraph':
		"""Rebuild Python objects from the heap produced by the page-side dump.

		Slots are materialised in two passes so shared identities and cycles
		in the page survive as shared identities and cycles here.
		"""
		if not payload.get('installed'):
			return cls(token=None, renderers=[], roots=[], host_instances=[])

		heap: list[dict[str, Any]] = payload.get('heap') or []
		slots: list[Any] = [cls._shell(entry) for entry in heap]

		def resolve(value: Any) -> Any:
			if isinstance(value, dict) and '$ref' in value:
				index = value['$ref']
				if isinstance(index, int) and 0 <= index < len(slots):
					return slots[index]
				return Truncated('dangling')
			return value

		host_instances: dict[int, HostInstance] = {}
		for entry, slot in zip(heap, slots):
			kind = entry.get('kind')
			if kind == 'fiber':
				slot.type = resolve(entry.get('type'))
				slot.element_type = resolve(entry.get('elementType'))
				slot.memoized_props = resolve(entry.get('memoizedProps'))
				slot.memoized_state = resolve(entry.get('memoizedState'))
				slot.state_node = resolve(entry.get('stateNode'))
				slot.parent = cls._as_fiber(resolve(entry.get('return')))
				slot.child = cls._as_fiber(resolve(entry.get('child')))
				slot.sibling = cls._as_fiber(resolve(entry.get('sibling')))
			elif kind == 'array':
				slot.extend(resolve(item) for item in entry.get('items') or [])
			elif kind == 'object':
				for key, value in entry.get('entries') or []:
					slot[key] = resolve(value)
			elif kind == 'dom' and slot.host_index is not None:
				host_instances[slot.host_index] = slot

		renderers = [HookRegistration.model_validate(item) for item in payload.get('renderers') or []]
		roots = [
			RenderRoot(
				renderer_id=item['rendererId'],
				root_index=item['rootIndex'],
				current=cls._as_fiber(resolve(item.get('current'))),
			)
			for item in payload.get('roots') or []
		]
		ordered_hosts = [host_instances[index] for index in sorted(host_instances)]
		logger.debug(f'Decoded {len(heap)} heap slots, {len(roots)} roots, {len(ordered_hosts)} host nodes')
		return cls(token=payload.get('token'), renderers=renderers, roots=roots, host_instances=ordered_hosts)

	@staticmethod
	def _shell(entry: dict[str, Any]) -> Any:
		kind = entry.get('kind')
		if kind == 'fiber':
			return Fiber(tag=entry.get('tag'), key=entry.get('key'))
		if kind == 'array':
			return []
		if kind == 'object':
			return {}
		if kind == 'function':
			return RemoteFunction(name=entry.get('name') or None, display_name=entry.get('displayName'))
		if kind == 'dom':
			return HostInstance(node_name=entry.get('nodeName', ''), host_index=entry.get('hostIndex'))
		return Truncated(entry.get('reason', 'unknown'))

	@staticmethod
	def _as_fiber(value: Any) -> Fiber | None:
		return value if isinstance(value, Fiber) else None


async def load_fiber_graph(channel: RuntimeChannel, profile: InspectorProfile) -> FiberGraph:
	"""Export the fiber graph from the page and resolve backend ids of its host nodes."""
	options = {
		'hookName': profile.hook_global_name,
		'maxFibers': profile.max_exported_fibers,
		'exportDepth': profile.export_depth,
		'exportKeys': profile.export_keys,
		'exportItems': profile.export_items,
	}
	result_id = await channel.evaluate(invoke(FIBER_GRAPH_DUMP, options), return_by_value=False, object_group=OBJECT_GROUP)
	if not result_id:
		raise RuntimeEvaluationError('Fiber graph export returned no object')

	try:
		raw = await channel.call_function_on(result_id, READ_JSON_FIELD)
		graph = FiberGraph.decode(json.loads(raw) if raw else {})

		if graph.host_instances:
			hosts_id = await channel.call_function_on(result_id, READ_HOSTS_FIELD, return_by_value=False)
			element_ids = await channel.get_array_object_ids(hosts_id) if hosts_id else []
			for host in graph.host_instances:
				element_id = element_ids[host.host_index] if host.host_index < len(element_ids) else None
				if element_id is None:
					continue
				try:
					host.backend_node_id = await channel.describe_backend_node_id(element_id)
				except Exception as e:
					logger.warning(f'Failed to describe host node {host.node_name}: {e}')
	finally:
		await channel.release_object_group(OBJECT_GROUP)

	return graph
