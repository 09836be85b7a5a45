from react_lens.dom.a11y.service import A11yService
from react_lens.dom.component_map.processor import ComponentMapProcessor
from react_lens.dom.component_map.tree_serializer import ComponentMapSerializer
from react_lens.dom.component_map.views import AccessibilityInfo, CorrelatedNode
from react_lens.dom.fiber.views import ComponentDescriptor, FiberKind, RenderRoot, SourceLocation
from react_lens.service import ReactInspector
from tests.helpers import FakeChannel, ax_node, component, host, host_root, link, login_app, login_ax_tree, text


def build(roots, ax_tree=None, include_state=False):
	snapshot = A11yService(FakeChannel()).build_snapshot(ax_tree or login_ax_tree())
	return ComponentMapProcessor().build(snapshot, roots, include_state=include_state)


def component_lines(text_block: str) -> list[str]:
	lines = text_block.splitlines()[2:]
	return [line for line in lines if not line.lstrip('│├└─ ').startswith('[')]


async def test_login_button_end_to_end(profile):
	channel = FakeChannel(roots=[login_app()], ax_tree=login_ax_tree())
	result = await ReactInspector(channel, profile).get_component_map(verbose=False, include_state=False)

	assert result.success
	assert result.text == '\n'.join(
		[
			'React Component Tree:',
			'',
			'LoginButton {label, onClick}',
			'└─ [button] "Log in"',
			'   └─ [StaticText] "Log in"',
		]
	)
	assert component_lines(result.text) == ['LoginButton {label, onClick}']
	assert result.tree.component_nodes == 1
	assert result.tree.metadata['roots'] == ['1:0']


def test_component_node_carries_first_host_accessibility():
	response = build([login_app()])
	(login,) = response.root.children
	assert login.component.name == 'LoginButton'
	assert login.component.id == '1:0:0.0.0'
	assert login.backend_node_id == 42
	assert login.get_accessibility_role() == 'button'
	assert response.total_nodes == 3
	assert response.correlated_nodes == 3


def test_hosts_missing_from_snapshot_are_transparent():
	# the pruned div (41) and a host with no DOM reference contribute no nodes
	orphan = host('span', None)
	root = login_app()
	root.current.child.child.sibling = orphan
	orphan.parent = root.current.child
	response = build([root])
	assert [repr(node) for node in response.root.iter_nodes()] == [
		'<host a11y:RootWebArea>',
		'<LoginButton [function]>',
		'<host a11y:button>',
		'<host a11y:StaticText>',
	]


def test_state_is_included_at_depth_one():
	counter = component('Counter', {'start': 0}, state={'count': 1, 'history': {'last': 0}})
	root = RenderRoot(1, 0, link(host_root(), link(counter, host('button', 42))))
	response = build([root], include_state=True)
	(node,) = response.root.children
	assert node.component.state == {'count': 1, 'history': '[Max Depth]'}

	text_block = ComponentMapSerializer().to_text(response)
	assert 'Counter {start} state={"count":1,"history":"[Max Depth]"}' in text_block


def test_state_is_omitted_by_default():
	counter = component('Counter', state={'count': 1})
	root = RenderRoot(1, 0, link(host_root(), link(counter, host('button', 42))))
	(node,) = build([root]).root.children
	assert node.component.state is None


def test_fiber_reachable_twice_is_emitted_once():
	shared = link(component('Shared'), host('button', 42))
	first = RenderRoot(1, 0, link(host_root(), shared))
	second = RenderRoot(1, 1, shared)
	response = build([first, second])
	assert [node.component.name for node in response.root.iter_nodes() if node.component] == ['Shared']


def test_backend_id_shared_by_two_roots():
	first = RenderRoot(1, 0, link(host_root(), link(component('A'), host('button', 42))))
	second = RenderRoot(2, 0, link(host_root(), link(component('B'), host('button', 42))))
	response = build([first, second])
	names = [node.component.name for node in response.root.children]
	assert names == ['A', 'B']
	assert all(node.children[0].get_accessibility_name() == 'Log in' for node in response.root.children)


def test_duplicate_backend_ids_in_snapshot_last_wins():
	tree = {
		'nodes': [
			ax_node('1', 'RootWebArea', None, ['2', '3'], backend_id=1),
			ax_node('2', 'button', 'First', [], backend_id=42),
			ax_node('3', 'button', 'Second', [], backend_id=42),
		]
	}
	root = RenderRoot(1, 0, link(host_root(), host('button', 42)))
	(node,) = build([root], ax_tree=tree).root.children
	assert node.get_accessibility_name() == 'Second'


class TestSerializer:
	def node(self, role, name=None, children=None):
		return CorrelatedNode(
			accessibility=AccessibilityInfo(uid=f'1_{role}', role=role, name=name),
			children=children or [],
		)

	def test_connectors(self):
		form = CorrelatedNode(
			component=ComponentDescriptor(
				id='1:0:0.0',
				name='Form',
				type=FiberKind.CLASS_COMPONENT,
				source=SourceLocation(file_name='src/Form.tsx', line_number=10, column_number=2),
			),
			props_summary=['onSubmit'],
			children=[
				self.node('textbox', 'Email', [self.node('StaticText', 'you@example.com')]),
				self.node('button', 'Send'),
			],
		)
		lines = ComponentMapSerializer().render_lines([form, self.node('contentinfo')])
		assert lines == [
			'Form {onSubmit} (src/Form.tsx:10:2)',
			'├─ [textbox] "Email"',
			'│  └─ [StaticText] "you@example.com"',
			'└─ [button] "Send"',
			'[contentinfo]',
		]

	def test_long_values_are_shortened(self):
		serializer = ComponentMapSerializer()
		assert serializer.format_node(self.node('paragraph', '  ' + 'x' * 100 + ' ')) == f'[paragraph] "{"x" * 80}..."'
		bulky = CorrelatedNode(
			component=ComponentDescriptor(id='1:0:0', name='Table', type=FiberKind.FUNCTION_COMPONENT, state={'rows': 'y' * 60})
		)
		assert serializer.format_node(bulky) == 'Table state={...}'
		assert serializer.format_node(CorrelatedNode()) == '[generic]'

	def test_empty_map(self):
		response = build([RenderRoot(1, 0, host_root())])
		assert ComponentMapSerializer().to_text(response) == 'React Component Tree:\n'


def test_text_fibers_correlate_with_static_text():
	root = RenderRoot(1, 0, link(host_root(), text('Log in', 43)))
	(node,) = build([root]).root.children
	assert node.get_accessibility_role() == 'StaticText'
