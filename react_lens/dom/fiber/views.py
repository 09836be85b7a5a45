from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FiberKind(str, Enum):
	"""What a fiber represents, independent of React's numeric work tags."""

	FUNCTION_COMPONENT = 'function'
	CLASS_COMPONENT = 'class'
	FORWARD_REF = 'forward_ref'
	MEMO_COMPONENT = 'memo'
	HOST = 'host'
	OTHER = 'other'

	@property
	def is_authored(self) -> bool:
		return self in AUTHORED_KINDS


AUTHORED_KINDS = frozenset(
	{
		FiberKind.FUNCTION_COMPONENT,
		FiberKind.CLASS_COMPONENT,
		FiberKind.FORWARD_REF,
		FiberKind.MEMO_COMPONENT,
	}
)

# React work tags -> kind. Tags missing from this table are OTHER.
FIBER_TAG_KINDS: dict[int, FiberKind] = {
	0: FiberKind.FUNCTION_COMPONENT,  # FunctionComponent
	1: FiberKind.CLASS_COMPONENT,  # ClassComponent
	2: FiberKind.FUNCTION_COMPONENT,  # IndeterminateComponent (React < 19)
	5: FiberKind.HOST,  # HostComponent
	6: FiberKind.HOST,  # HostText
	11: FiberKind.FORWARD_REF,  # ForwardRef
	# 14 (MemoComponent) wraps a child fiber that carries the component itself
	15: FiberKind.MEMO_COMPONENT,  # SimpleMemoComponent
	26: FiberKind.HOST,  # HostHoistable
	27: FiberKind.HOST,  # HostSingleton
}


def kind_for_tag(tag: int | None) -> FiberKind:
	if tag is None:
		return FiberKind.OTHER
	return FIBER_TAG_KINDS.get(tag, FiberKind.OTHER)


# Mirrored runtime objects.
#
# These are rebuilt from the page on every call and never cached; the graph
# they form may contain cycles (return/child pointers, props that refer back).


class Fiber:
	"""Read-only mirror of one React fiber."""

	__slots__ = (
		'tag',
		'key',
		'type',
		'element_type',
		'memoized_props',
		'memoized_state',
		'state_node',
		'parent',
		'child',
		'sibling',
	)

	def __init__(
		self,
		tag: int | None = None,
		key: str | None = None,
		type: Any = None,
		element_type: Any = None,
		memoized_props: Any = None,
		memoized_state: Any = None,
		state_node: Any = None,
		parent: 'Fiber | None' = None,
		child: 'Fiber | None' = None,
		sibling: 'Fiber | None' = None,
	):
		self.tag = tag
		self.key = key
		self.type = type
		self.element_type = element_type
		self.memoized_props = memoized_props
		self.memoized_state = memoized_state
		self.state_node = state_node
		self.parent = parent
		self.child = child
		self.sibling = sibling

	@property
	def kind(self) -> FiberKind:
		return kind_for_tag(self.tag)

	def children(self) -> list['Fiber']:
		"""Direct children in sibling order; stops on a repeated sibling."""
		result: list[Fiber] = []
		seen: set[int] = set()
		current = self.child
		while isinstance(current, Fiber) and id(current) not in seen:
			seen.add(id(current))
			result.append(current)
			current = current.sibling
		return result

	def __repr__(self) -> str:
		return f'<Fiber tag={self.tag} kind={self.kind.value}>'


class RemoteFunction:
	"""A function that lives in the page; only its names cross the boundary."""

	__slots__ = ('name', 'display_name', 'attributes')

	def __init__(self, name: str | None = None, display_name: str | None = None, attributes: dict | None = None):
		self.name = name
		self.display_name = display_name
		self.attributes = attributes if attributes is not None else {}

	@property
	def __name__(self) -> str:
		return self.name or ''

	def __repr__(self) -> str:
		return f'<RemoteFunction {self.name or "anonymous"}>'


class HostInstance:
	"""A rendered DOM node owned by a host fiber."""

	__slots__ = ('node_name', 'host_index', 'backend_node_id')

	def __init__(self, node_name: str, host_index: int | None = None, backend_node_id: int | None = None):
		self.node_name = node_name
		self.host_index = host_index
		self.backend_node_id = backend_node_id

	def __repr__(self) -> str:
		return f'<HostInstance {self.node_name} backend={self.backend_node_id}>'


class Truncated:
	"""Stub for a value the page-side export stopped at."""

	__slots__ = ('reason',)

	def __init__(self, reason: str):
		self.reason = reason

	def __repr__(self) -> str:
		return f'<Truncated {self.reason}>'


class RenderRoot:
	"""A committed root: its renderer, its position among that renderer's roots, and the current fiber."""

	__slots__ = ('renderer_id', 'root_index', 'current')

	def __init__(self, renderer_id: int, root_index: int, current: Fiber | None):
		self.renderer_id = renderer_id
		self.root_index = root_index
		self.current = current

	@property
	def root_id(self) -> str:
		return f'{self.renderer_id}:{self.root_index}'


# Transport models


class HookRegistration(BaseModel):
	"""A React renderer that registered against the hook."""

	id: int = Field(description='Renderer id assigned by the hook')
	name: str | None = Field(None, description='Renderer package name, e.g. react-dom')
	version: str | None = Field(None, description='Renderer version')
	bundle_type: int | None = Field(None, description='0 for production bundles, 1 for development')


class AttachResult(BaseModel):
	attached: bool
	renderers: list[HookRegistration] = Field(default_factory=list)
	message: str | None = None


class RootInfo(BaseModel):
	renderer_id: int
	renderer_name: str | None = None
	renderer_version: str | None = None
	root_id: str
	root_index: int
	display_name: str = 'Unknown'
	nodes: int = Field(0, description='Fibers under the root, capped')


class SourceLocation(BaseModel):
	file_name: str | None = None
	line_number: int | None = None
	column_number: int | None = None

	def __str__(self) -> str:
		return f'{self.file_name}:{self.line_number or "?"}:{self.column_number or "?"}'


class OwnerInfo(BaseModel):
	name: str
	type: FiberKind
	source: SourceLocation | None = None


class ComponentSummary(BaseModel):
	"""One row of a component listing."""

	id: str
	name: str
	type: FiberKind
	key: str | None = None
	depth: int
	path: str


class ComponentDescriptor(BaseModel):
	"""Everything known about one authored component."""

	id: str
	name: str
	type: FiberKind
	key: str | None = None
	props: Any | None = None
	state: Any | None = None
	source: SourceLocation | None = None
	owners: list[OwnerInfo] | None = None
	path: str | None = None
	backend_node_id: int | None = Field(None, description='Backend id of the nearest DOM node this component rendered')
