from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

# CDP Accessibility domain types (the subset the reader consumes)


class AXValue(BaseModel):
	"""A single computed AX property."""

	model_config = ConfigDict(extra='ignore')

	type: str = Field(description='The type of this value')
	value: Any | None = Field(None, description='The computed value of this property')


class AXProperty(BaseModel):
	"""An accessibility property."""

	name: str = Field(description='The name of this property')
	value: AXValue = Field(description='The value of this property')


class AXNode(BaseModel):
	"""A node in the flat accessibility tree returned by getFullAXTree."""

	model_config = ConfigDict(extra='allow')

	nodeId: str = Field(description='Unique identifier for this node')
	ignored: bool = Field(False, description='Whether this node is ignored for accessibility')
	role: AXValue | None = Field(None, description="This Node's role, whether explicit or implicit")
	name: AXValue | None = Field(None, description='The accessible name for this Node')
	description: AXValue | None = Field(None, description='The accessible description for this Node')
	value: AXValue | None = Field(None, description='The value for this Node')
	properties: list[AXProperty] | None = Field(None, description='All other properties')
	parentId: str | None = Field(None, description="ID for this node's parent")
	childIds: list[str] | None = Field(None, description="IDs for each of this node's child nodes")
	backendDOMNodeId: int | None = Field(None, description='The backend ID for the associated DOM node, if any')

	def get_property(self, property_name: str) -> Any | None:
		"""Value of a CDP property, falling back to a top-level field of the same name."""
		for prop in self.properties or []:
			if prop.name == property_name:
				return prop.value.value
		extra = (self.model_extra or {}).get(property_name)
		if isinstance(extra, dict):
			return extra.get('value')
		return extra


class AccessibilityTreeResponse(BaseModel):
	"""Response from Chrome DevTools Protocol Accessibility.getFullAXTree."""

	nodes: list[AXNode] = Field(default_factory=list, description='List of accessibility nodes')


# Materialised snapshot


class AccessibilityNode(BaseModel):
	"""A node of one accessibility snapshot, with its children attached."""

	uid: str = Field(description='Snapshot-scoped id, {snapshot_id}_{sequence}')
	role: str | None = None
	name: str | None = None
	value: Any | None = None
	description: str | None = None
	keyshortcuts: str | None = None
	roledescription: str | None = None
	disabled: bool | None = None
	expanded: bool | None = None
	focused: bool | None = None
	checked: Any | None = Field(None, description='true, false or "mixed"')
	pressed: Any | None = Field(None, description='true, false or "mixed"')
	backend_dom_node_id: int | None = Field(None, description='Backend id of the rendered DOM node')
	children: list['AccessibilityNode'] = Field(default_factory=list)

	def iter_nodes(self):
		"""Yield this node and its descendants in pre-order."""
		stack = [self]
		while stack:
			node = stack.pop()
			yield node
			stack.extend(reversed(node.children))

	def __repr__(self) -> str:
		label = f'{self.role or "?"}'
		if self.name:
			label += f' "{self.name}"'
		return f'<AccessibilityNode {self.uid} {label}>'


class AccessibilitySnapshot(BaseModel):
	root: AccessibilityNode
	snapshot_id: str
	total_nodes: int = Field(0, description='Nodes materialised in the snapshot')

	def index_by_backend_id(self) -> dict[int, AccessibilityNode]:
		"""Nodes that carry a DOM reference, keyed by it. Later nodes win on collisions."""
		index: dict[int, AccessibilityNode] = {}
		for node in self.root.iter_nodes():
			if node.backend_dom_node_id:
				index[node.backend_dom_node_id] = node
		return index

	def find(self, uid: str) -> Optional[AccessibilityNode]:
		for node in self.root.iter_nodes():
			if node.uid == uid:
				return node
		return None


AccessibilityNode.model_rebuild()
