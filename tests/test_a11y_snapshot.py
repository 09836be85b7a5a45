from react_lens.dom.a11y.service import A11yService
from tests.helpers import FakeChannel, ax_node, login_ax_tree


def nested_tree() -> dict:
	return {
		'nodes': [
			ax_node('1', 'RootWebArea', 'Shop', ['2', '5'], backend_id=1),
			ax_node('2', 'navigation', 'Main', ['3', '4'], backend_id=2),
			ax_node('3', 'link', 'Home', [], backend_id=3),
			ax_node('4', 'link', 'Cart', [], backend_id=4),
			ax_node('5', 'main', None, ['6'], backend_id=5),
			ax_node('6', 'heading', 'Products', [], backend_id=6),
		]
	}


def test_uids_are_distinct_and_preorder():
	snapshot = A11yService(FakeChannel()).build_snapshot(nested_tree())
	nodes = list(snapshot.root.iter_nodes())
	assert [n.uid for n in nodes] == [f'{snapshot.snapshot_id}_{i}' for i in range(6)]
	assert [n.name for n in nodes] == ['Shop', 'Main', 'Home', 'Cart', None, 'Products']
	assert len({n.uid for n in nodes}) == snapshot.total_nodes == 6


def test_ignored_nodes_are_pruned_and_children_hoisted():
	service = A11yService(FakeChannel())
	snapshot = service.build_snapshot(login_ax_tree())
	assert [child.role for child in snapshot.root.children] == ['button']
	assert snapshot.root.children[0].children[0].role == 'StaticText'
	assert snapshot.total_nodes == 3

	verbose = service.build_snapshot(login_ax_tree(), verbose=True)
	assert [child.role for child in verbose.root.children] == ['generic']
	assert verbose.total_nodes == 4


def test_empty_tree_is_none():
	service = A11yService(FakeChannel())
	assert service.build_snapshot({'nodes': []}) is None
	assert service.build_snapshot(None) is None


def test_properties_are_copied():
	tree = {
		'nodes': [
			ax_node(
				'1',
				'checkbox',
				'Subscribe',
				backend_id=9,
				properties=[
					{'name': 'checked', 'value': {'type': 'tristate', 'value': 'mixed'}},
					{'name': 'disabled', 'value': {'type': 'boolean', 'value': True}},
					{'name': 'keyshortcuts', 'value': {'type': 'string', 'value': 'Alt+S'}},
				],
			)
		]
	}
	tree['nodes'][0]['value'] = {'type': 'string', 'value': 'on'}
	tree['nodes'][0]['description'] = {'type': 'computedString', 'value': 'Weekly mail'}

	node = A11yService(FakeChannel()).build_snapshot(tree).root
	assert node.checked == 'mixed'
	assert node.disabled is True
	assert node.keyshortcuts == 'Alt+S'
	assert node.value == 'on'
	assert node.description == 'Weekly mail'
	assert node.backend_dom_node_id == 9
	assert node.expanded is None


def test_repeated_child_ids_are_visited_once():
	tree = {
		'nodes': [
			ax_node('1', 'RootWebArea', None, ['2', '2'], backend_id=1),
			ax_node('2', 'button', 'Once', ['1'], backend_id=2),
		]
	}
	snapshot = A11yService(FakeChannel()).build_snapshot(tree)
	assert snapshot.total_nodes == 2
	assert len(snapshot.root.children) == 1
	assert snapshot.root.children[0].children == []


def test_snapshot_ids_increase():
	service = A11yService(FakeChannel())
	first = service.build_snapshot(nested_tree())
	second = service.build_snapshot(nested_tree())
	assert int(second.snapshot_id) > int(first.snapshot_id)


def test_index_and_find():
	snapshot = A11yService(FakeChannel()).build_snapshot(nested_tree())
	index = snapshot.index_by_backend_id()
	assert index[4].name == 'Cart'
	assert snapshot.find(index[6].uid).role == 'heading'
	assert snapshot.find('missing') is None


async def test_snapshot_reads_from_channel():
	snapshot = await A11yService(FakeChannel(ax_tree=nested_tree())).snapshot()
	assert snapshot.root.role == 'RootWebArea'
	assert [child.role for child in snapshot.root.children] == ['navigation', 'main']
