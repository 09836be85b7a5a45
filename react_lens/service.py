import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from cdp_use import CDPClient

from react_lens.cdp.channel import RuntimeChannel
from react_lens.config import InspectorProfile
from react_lens.dom.a11y.service import A11yService
from react_lens.dom.component_map.processor import ComponentMapProcessor
from react_lens.dom.component_map.tree_serializer import ComponentMapSerializer
from react_lens.dom.fiber.graph import FiberGraph, load_fiber_graph
from react_lens.dom.fiber.hook import HookInstaller
from react_lens.dom.fiber.resolver import nearest_authored_ancestor
from react_lens.dom.fiber.views import Fiber, FiberKind, HostInstance
from react_lens.dom.fiber.walker import FiberTreeWalker, component_id, first_host_instance, walk
from react_lens.exceptions import ComponentNotFound, ReactLensError
from react_lens.views import (
	AttachResponse,
	BackendNodeComponentResponse,
	ComponentMapResult,
	ComponentResponse,
	ComponentsResponse,
	HighlightResponse,
	RootsResponse,
	SnapshotResponse,
	ToolFailure,
)

logger = logging.getLogger(__name__)

P = ParamSpec('P')
R = TypeVar('R')


def tool_boundary(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R | ToolFailure]]:
	"""Turn inspector errors into a ToolFailure result instead of raising."""

	@functools.wraps(func)
	async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R | ToolFailure:
		try:
			return await func(*args, **kwargs)
		except ReactLensError as e:
			logger.warning(f'{func.__name__} failed: {e}')
			return ToolFailure(error=str(e))
		except Exception as e:
			logger.error(f'{func.__name__} failed unexpectedly: {type(e).__name__}: {e}', exc_info=True)
			return ToolFailure(error=f'{type(e).__name__}: {e}')

	return wrapper


class ReactInspector:
	"""Public operations over one inspected page.

	Every call reads the page afresh; nothing but the registration table is
	kept between calls.
	"""

	def __init__(self, channel: RuntimeChannel, profile: InspectorProfile | None = None):
		self.channel = channel
		self.profile = profile or InspectorProfile()
		self.installer = HookInstaller(channel, self.profile)
		self.a11y_service = A11yService(channel)
		self.map_processor = ComponentMapProcessor()
		self.map_serializer = ComponentMapSerializer()

	@classmethod
	async def connect(cls, cdp: CDPClient, url: str | None = None, profile: InspectorProfile | None = None) -> 'ReactInspector':
		channel = await RuntimeChannel.from_page_target(cdp, url)
		await channel.enable_domains()
		return cls(channel, profile)

	async def _load_graph(self) -> FiberGraph:
		await self.installer.ensure_installed()
		return await load_fiber_graph(self.channel, self.profile)

	async def ensure_attached(self) -> AttachResponse:
		result = await self.installer.attach()
		return AttachResponse(attached=result.attached, renderers=result.renderers, message=result.message)

	@tool_boundary
	async def list_roots(self, renderer_id: int | None = None) -> RootsResponse:
		graph = await self._load_graph()
		renderer_names = {r.id: (r.name, r.version) for r in graph.renderers}
		roots = FiberTreeWalker(graph.roots).list_roots(renderer_names, self.profile.root_node_count_limit)
		if renderer_id is not None:
			roots = [root for root in roots if root.renderer_id == renderer_id]
		return RootsResponse(roots=roots)

	@tool_boundary
	async def list_components(
		self,
		renderer_id: int | None = None,
		root_index: int | None = None,
		depth: int | None = None,
		max_nodes: int | None = None,
		name_filter: str | None = None,
		include_all: bool = False,
	) -> ComponentsResponse:
		graph = await self._load_graph()
		components = FiberTreeWalker(graph.roots).list_components(
			depth=depth if depth is not None else self.profile.list_depth,
			max_nodes=max_nodes if max_nodes is not None else self.profile.list_max_nodes,
			name_filter=name_filter,
			include_all=include_all,
			renderer_id=renderer_id,
			root_index=root_index,
		)
		return ComponentsResponse(components=components)

	@tool_boundary
	async def get_component(self, id: str) -> ComponentResponse:
		graph = await self._load_graph()
		walker = FiberTreeWalker(graph.roots)
		root, fiber = walker.find_by_id(id)
		path = id.rsplit(':', 1)[-1]
		return ComponentResponse(component=self._describe(walker, fiber, component_id(root, path), path))

	@tool_boundary
	async def get_component_for_backend_node(self, backend_node_id: int) -> BackendNodeComponentResponse:
		"""Resolve the authored component that rendered a DOM node."""
		graph = await self._load_graph()
		host_fiber = self._find_host_fiber(graph, backend_node_id)
		if host_fiber is None:
			raise ComponentNotFound(f'No React host fiber renders backend node {backend_node_id}', searched=backend_node_id)

		lookup = nearest_authored_ancestor(host_fiber, self.profile.max_ancestor_steps)
		if lookup.fiber is None:
			logger.info(f'No authored ancestor for backend node {backend_node_id} within {lookup.steps} steps')
			return BackendNodeComponentResponse(
				backend_node_id=backend_node_id, steps=lookup.steps, exhausted=lookup.exhausted
			)

		walker = FiberTreeWalker(graph.roots)
		located = walker.path_of(lookup.fiber)
		found_id, path = (component_id(located[0], located[1]), located[1]) if located else (None, None)
		return BackendNodeComponentResponse(
			backend_node_id=backend_node_id,
			component=self._describe(walker, lookup.fiber, found_id, path),
			steps=lookup.steps,
		)

	@tool_boundary
	async def take_snapshot(self, verbose: bool = False) -> SnapshotResponse:
		await self.installer.ensure_installed()
		snapshot = await self.a11y_service.snapshot(verbose)
		if snapshot is None:
			raise ComponentNotFound('Accessibility tree is empty')
		return SnapshotResponse(snapshot=snapshot)

	@tool_boundary
	async def get_component_map(self, verbose: bool = False, include_state: bool = False) -> ComponentMapResult:
		"""Merged component + accessibility tree, as text and as structure."""
		await self.installer.ensure_installed()
		snapshot = await self.a11y_service.snapshot(verbose)
		if snapshot is None:
			raise ComponentNotFound('Accessibility tree is empty')

		graph = await load_fiber_graph(self.channel, self.profile)
		if not graph.roots:
			raise ComponentNotFound('No React roots found')

		tree = self.map_processor.build(snapshot, graph.roots, include_state=include_state)
		return ComponentMapResult(text=self.map_serializer.to_text(tree), tree=tree)

	@tool_boundary
	async def highlight_component(self, id: str) -> HighlightResponse:
		graph = await self._load_graph()
		_, fiber = FiberTreeWalker(graph.roots).find_by_id(id)
		host = first_host_instance(fiber)
		if host is None or host.backend_node_id is None:
			raise ComponentNotFound(f'Component {id} rendered no DOM node', searched=id)
		await self.channel.highlight_backend_node(host.backend_node_id)
		return HighlightResponse(component_id=id, backend_node_id=host.backend_node_id, message=f'<{host.node_name.lower()}>')

	def _describe(self, walker: FiberTreeWalker, fiber: Fiber, found_id: str | None, path: str | None):
		return walker.describe(
			fiber,
			component_id=found_id,
			path=path,
			serialize_depth=self.profile.serialize_depth,
			max_properties=self.profile.serialize_max_properties,
			max_array_items=self.profile.serialize_max_array_items,
			max_owners=self.profile.max_owners,
		)

	@staticmethod
	def _find_host_fiber(graph: FiberGraph, backend_node_id: int) -> Fiber | None:
		for root in graph.roots:
			for visited in walk(root):
				fiber = visited.fiber
				if fiber.kind != FiberKind.HOST or not isinstance(fiber.state_node, HostInstance):
					continue
				if fiber.state_node.backend_node_id == backend_node_id:
					return fiber
		return None
