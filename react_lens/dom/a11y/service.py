import logging
import time
from typing import Any

from react_lens.cdp.channel import RuntimeChannel
from react_lens.dom.a11y.views import AccessibilityNode, AccessibilitySnapshot, AccessibilityTreeResponse, AXNode

logger = logging.getLogger(__name__)

COPIED_PROPERTIES = ('keyshortcuts', 'roledescription', 'disabled', 'expanded', 'focused', 'checked', 'pressed')


class A11yService:
	def __init__(self, channel: RuntimeChannel):
		self.channel = channel
		self._last_snapshot_id = 0

	def _next_snapshot_id(self) -> str:
		"""Millisecond timestamp, bumped so ids never repeat within one service."""
		snapshot_id = max(int(time.time() * 1000), self._last_snapshot_id + 1)
		self._last_snapshot_id = snapshot_id
		return str(snapshot_id)

	async def snapshot(self, verbose: bool = False) -> AccessibilitySnapshot | None:
		"""Fetch the page's accessibility tree and rebuild its hierarchy."""
		raw_tree = await self.channel.get_full_ax_tree()
		return self.build_snapshot(raw_tree, verbose)

	def build_snapshot(self, raw_tree: Any, verbose: bool = False) -> AccessibilitySnapshot | None:
		"""Materialise a flat CDP node list into a tree rooted at its first node.

		UIDs are handed out in pre-order. Ignored nodes are dropped unless
		``verbose``; their non-ignored descendants are attached to the closest
		kept ancestor.
		"""
		tree = AccessibilityTreeResponse.model_validate(raw_tree or {'nodes': []})
		if not tree.nodes:
			return None

		node_lookup: dict[str, AXNode] = {}
		children_lookup: dict[str, list[str]] = {}
		for node in tree.nodes:
			node_lookup[node.nodeId] = node
			if node.childIds:
				children_lookup[node.nodeId] = node.childIds

		snapshot_id = self._next_snapshot_id()
		counter = {'value': 0}
		visited: set[str] = set()

		def materialise(node: AXNode) -> AccessibilityNode:
			uid = f'{snapshot_id}_{counter["value"]}'
			counter['value'] += 1
			processed = self._convert_node(node, uid)
			processed.children = collect_children(node)
			return processed

		def collect_children(node: AXNode) -> list[AccessibilityNode]:
			children: list[AccessibilityNode] = []
			for child_id in children_lookup.get(node.nodeId, []):
				child = node_lookup.get(child_id)
				if child is None or child_id in visited:
					continue
				visited.add(child_id)
				if not verbose and child.ignored:
					children.extend(collect_children(child))
				else:
					children.append(materialise(child))
			return children

		root_node = tree.nodes[0]
		visited.add(root_node.nodeId)
		root = materialise(root_node)

		logger.debug(f'Snapshot {snapshot_id}: {counter["value"]} of {len(tree.nodes)} nodes materialised')
		return AccessibilitySnapshot(root=root, snapshot_id=snapshot_id, total_nodes=counter['value'])

	def _convert_node(self, node: AXNode, uid: str) -> AccessibilityNode:
		processed = AccessibilityNode(
			uid=uid,
			role=self._ax_text(node.role.value) if node.role else None,
			name=self._ax_text(node.name.value) if node.name else None,
			backend_dom_node_id=node.backendDOMNodeId,
		)
		if node.value is not None and node.value.value is not None:
			processed.value = node.value.value
		if node.description is not None and node.description.value is not None:
			processed.description = str(node.description.value)
		for property_name in COPIED_PROPERTIES:
			property_value = node.get_property(property_name)
			if property_value is not None:
				setattr(processed, property_name, property_value)
		return processed

	@staticmethod
	def _ax_text(value: Any) -> str | None:
		if value is None:
			return None
		return str(value)
