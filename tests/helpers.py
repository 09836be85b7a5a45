import json
from typing import Any

from react_lens.dom.fiber.scripts import READ_HOSTS_FIELD, READ_JSON_FIELD
from react_lens.dom.fiber.views import Fiber, HostInstance, RemoteFunction, RenderRoot, Truncated
from react_lens.exceptions import RuntimeEvaluationError

# Fiber builders


def link(parent: Fiber, *children: Fiber) -> Fiber:
	"""Wire child/sibling/parent pointers and return the parent."""
	parent.child = children[0] if children else None
	for index, child in enumerate(children):
		child.parent = parent
		child.sibling = children[index + 1] if index + 1 < len(children) else None
	return parent


def component(name: str | None, props: dict | None = None, state: Any = None, tag: int = 0, key: str | None = None) -> Fiber:
	return Fiber(
		tag=tag,
		key=key,
		type=RemoteFunction(name=name),
		element_type=RemoteFunction(name=name),
		memoized_props=props if props is not None else {},
		memoized_state=state,
	)


def host(tag_name: str, backend_node_id: int | None, props: dict | None = None) -> Fiber:
	return Fiber(
		tag=5,
		type=tag_name,
		element_type=tag_name,
		memoized_props=props if props is not None else {},
		state_node=HostInstance(tag_name.upper(), backend_node_id=backend_node_id),
	)


def text(value: str, backend_node_id: int | None) -> Fiber:
	return Fiber(tag=6, memoized_props=value, state_node=HostInstance('#text', backend_node_id=backend_node_id))


def host_root() -> Fiber:
	return Fiber(tag=3)


def other(tag: int = 7) -> Fiber:
	return Fiber(tag=tag)


def chain(*fibers: Fiber) -> Fiber:
	"""Link fibers as a single-child chain and return the first."""
	for parent, child in zip(fibers, fibers[1:]):
		link(parent, child)
	return fibers[0]


def login_app() -> RenderRoot:
	"""HostRoot > div > LoginButton > button > "Log in"; LoginButton is the only authored fiber."""
	button = link(host('button', 42, {'type': 'button'}), text('Log in', 43))
	login = link(component('LoginButton', {'label': 'Log in', 'onClick': RemoteFunction('submit'), 'children': 'x'}), button)
	container = link(host('div', 41, {'className': 'page'}), login)
	return RenderRoot(renderer_id=1, root_index=0, current=link(host_root(), container))


# Page-side encoding, as produced by the graph dump script


def encode_graph(roots: list[RenderRoot], renderers: list[dict] | None = None, token: str = 'page-1') -> tuple[dict, list]:
	"""Encode a Python fiber graph into the heap payload plus backend ids of host nodes."""
	heap: list[Any] = []
	ids: dict[int, int] = {}
	host_backend_ids: list[int | None] = []

	def ref(value: Any) -> Any:
		if value is None or isinstance(value, (str, int, float, bool)):
			return value
		if id(value) in ids:
			return {'$ref': ids[id(value)]}
		index = len(heap)
		ids[id(value)] = index
		heap.append(None)

		if isinstance(value, Fiber):
			entry: dict[str, Any] = {'kind': 'fiber', 'tag': value.tag, 'key': value.key}
			heap[index] = entry
			entry['type'] = ref(value.type)
			entry['elementType'] = ref(value.element_type)
			entry['memoizedProps'] = ref(value.memoized_props)
			entry['memoizedState'] = ref(value.memoized_state)
			entry['stateNode'] = ref(value.state_node)
			entry['return'] = ref(value.parent)
			entry['child'] = ref(value.child)
			entry['sibling'] = ref(value.sibling)
		elif isinstance(value, HostInstance):
			heap[index] = {'kind': 'dom', 'nodeName': value.node_name, 'hostIndex': len(host_backend_ids)}
			host_backend_ids.append(value.backend_node_id)
		elif isinstance(value, RemoteFunction):
			heap[index] = {'kind': 'function', 'name': value.name, 'displayName': value.display_name}
		elif isinstance(value, Truncated):
			heap[index] = {'kind': 'truncated', 'reason': value.reason}
		elif isinstance(value, list):
			entry = {'kind': 'array', 'length': len(value), 'items': []}
			heap[index] = entry
			entry['items'] = [ref(item) for item in value]
		elif isinstance(value, dict):
			entry = {'kind': 'object', 'ctor': None, 'entries': []}
			heap[index] = entry
			entry['entries'] = [[key, ref(item)] for key, item in value.items()]
		else:
			raise TypeError(f'cannot encode {value!r}')
		return {'$ref': index}

	encoded_roots = [{'rendererId': r.renderer_id, 'rootIndex': r.root_index, 'current': ref(r.current)} for r in roots]
	payload = {
		'installed': True,
		'token': token,
		'version': 1,
		'renderers': renderers
		if renderers is not None
		else [{'id': 1, 'name': 'react-dom', 'version': '18.3.1', 'bundle_type': 1}],
		'roots': encoded_roots,
		'heap': heap,
	}
	return payload, host_backend_ids


# Accessibility builders


def ax_node(
	node_id: str,
	role: str,
	name: str | None = None,
	child_ids: list[str] | None = None,
	backend_id: int | None = None,
	ignored: bool = False,
	properties: list[dict] | None = None,
) -> dict:
	node: dict[str, Any] = {
		'nodeId': node_id,
		'ignored': ignored,
		'role': {'type': 'role', 'value': role},
		'childIds': child_ids or [],
	}
	if name is not None:
		node['name'] = {'type': 'computedString', 'value': name}
	if backend_id is not None:
		node['backendDOMNodeId'] = backend_id
	if properties:
		node['properties'] = properties
	return node


def login_ax_tree() -> dict:
	return {
		'nodes': [
			ax_node('1', 'RootWebArea', 'Demo', ['2'], backend_id=1),
			ax_node('2', 'generic', None, ['3'], backend_id=41, ignored=True),
			ax_node('3', 'button', 'Log in', ['4'], backend_id=42),
			ax_node('4', 'StaticText', 'Log in', [], backend_id=43),
		]
	}


# Fake page


class FakeChannel:
	"""Stands in for RuntimeChannel; models just enough of the page for the engine."""

	def __init__(
		self,
		roots: list[RenderRoot] | None = None,
		ax_tree: dict | None = None,
		reject_injection: bool = False,
		install_on_reload: bool = True,
	):
		self.roots = roots or []
		self.ax_tree = ax_tree if ax_tree is not None else {'nodes': []}
		self.reject_injection = reject_injection
		self.install_on_reload = install_on_reload
		self.hook_installed = False
		self.token = 'page-1'
		self.page_loads = 1
		self.renderers: list[dict] = [{'id': 1, 'name': 'react-dom', 'version': '18.3.1', 'bundle_type': 1}]
		self.init_scripts: list[str] = []
		self.reloads = 0
		self.evaluations: list[str] = []
		self.highlighted: list[int] = []
		self.released: list[str] = []
		self._host_backend_ids: list[int | None] = []

	async def enable_domains(self) -> None:
		return None

	async def set_bypass_csp(self, enabled: bool = True) -> None:
		return None

	async def add_script_on_new_document(self, source: str) -> str:
		self.init_scripts.append(source)
		return str(len(self.init_scripts))

	async def reload(self) -> None:
		self.reloads += 1
		self.navigate()

	def navigate(self) -> None:
		"""A new document loads; only the pre-navigation script can install the hook."""
		self.page_loads += 1
		self.hook_installed = self.install_on_reload and bool(self.init_scripts)

	async def evaluate(self, expression: str, return_by_value: bool = True, object_group: str | None = None) -> Any:
		self.evaluations.append(expression)
		if 'installReactLensHook' in expression:
			if self.reject_injection:
				raise RuntimeEvaluationError('Page script failed: EvalError: Refused to evaluate a string')
			self.hook_installed = True
			return {'installed': True, 'created': True, 'token': self.token, 'version': 1}
		if 'readReactLensStatus' in expression:
			page_id = f'load-{self.page_loads}'
			if not self.hook_installed:
				return {'installed': False, 'page_id': page_id}
			return {
				'installed': True,
				'page_id': page_id,
				'token': self.token,
				'version': 1,
				'renderers': self.renderers,
				'roots': {str(r['id']): sum(1 for root in self.roots if root.renderer_id == r['id']) for r in self.renderers},
			}
		if 'dumpReactLensGraph' in expression:
			return 'graph-result'
		raise AssertionError(f'unexpected expression {expression[:60]}')

	async def call_function_on(self, object_id: str, declaration: str, return_by_value: bool = True) -> Any:
		assert object_id == 'graph-result'
		if declaration == READ_JSON_FIELD:
			if not self.hook_installed:
				return json.dumps({'installed': False})
			payload, self._host_backend_ids = encode_graph(self.roots, self.renderers, self.token)
			return json.dumps(payload)
		if declaration == READ_HOSTS_FIELD:
			return 'hosts'
		raise AssertionError(f'unexpected declaration {declaration}')

	async def get_array_object_ids(self, object_id: str) -> list[str | None]:
		assert object_id == 'hosts'
		return [f'host-{index}' for index in range(len(self._host_backend_ids))]

	async def describe_backend_node_id(self, object_id: str) -> int | None:
		return self._host_backend_ids[int(object_id.split('-')[1])]

	async def release_object_group(self, object_group: str) -> None:
		self.released.append(object_group)

	async def get_full_ax_tree(self) -> dict:
		return self.ax_tree

	async def highlight_backend_node(self, backend_node_id: int) -> None:
		self.highlighted.append(backend_node_id)


# Real page over a Playwright CDP session


class _CDPDomain:
	def __init__(self, session: Any, domain: str):
		self.session = session
		self.domain = domain

	def __getattr__(self, method: str):
		async def send(params: dict | None = None, session_id: str | None = None) -> dict:
			return await self.session.send(f'{self.domain}.{method}', params or {})

		return send


class _CDPSend:
	def __init__(self, session: Any):
		self.session = session

	def __getattr__(self, domain: str) -> _CDPDomain:
		return _CDPDomain(self.session, domain)


class PlaywrightCDPClient:
	"""Lets RuntimeChannel drive a Playwright CDPSession through the ``cdp.send.Domain.method`` shape."""

	def __init__(self, session: Any):
		self.send = _CDPSend(session)
