from typing import Any

from pydantic import BaseModel, Field

from react_lens.dom.a11y.views import AccessibilityNode
from react_lens.dom.fiber.views import ComponentDescriptor


class AccessibilityInfo(BaseModel):
	"""Accessibility data of one node, without its subtree."""

	uid: str
	role: str | None = None
	name: str | None = None
	value: Any | None = None
	description: str | None = None
	disabled: bool | None = None
	expanded: bool | None = None
	focused: bool | None = None
	checked: Any | None = None
	pressed: Any | None = None

	@classmethod
	def from_node(cls, node: AccessibilityNode) -> 'AccessibilityInfo':
		return cls.model_validate(node.model_dump(exclude={'children'}))


class CorrelatedNode(BaseModel):
	"""Accessibility and component data that share one rendered DOM node.

	Accessibility without a component is a plain host element. A component
	node carries the accessibility data of the nearest DOM node it rendered,
	when that node is in the snapshot.
	"""

	backend_node_id: int | None = Field(None, description='Backend id of the DOM node both trees point at')
	accessibility: AccessibilityInfo | None = Field(None, description='Accessibility data if available')
	component: ComponentDescriptor | None = Field(None, description='Component data for authored fibers')
	props_summary: list[str] = Field(default_factory=list, description='First prop names of the component')
	children: list['CorrelatedNode'] = Field(default_factory=list, description='Child nodes')

	def get_accessibility_role(self) -> str | None:
		return self.accessibility.role if self.accessibility else None

	def get_accessibility_name(self) -> str | None:
		return self.accessibility.name if self.accessibility else None

	def iter_nodes(self):
		stack = [self]
		while stack:
			node = stack.pop()
			yield node
			stack.extend(reversed(node.children))

	def __repr__(self) -> str:
		if self.component:
			return f'<{self.component.name} [{self.component.type.value}]>'
		role = self.get_accessibility_role() or '?'
		return f'<host a11y:{role}>'


class ComponentMapResponse(BaseModel):
	"""Merged accessibility + component tree for one snapshot."""

	root: CorrelatedNode = Field(description='Root node of the merged tree (the document)')
	snapshot_id: str
	total_nodes: int = Field(description='Nodes in the merged tree, root excluded')
	component_nodes: int = Field(description='Nodes carrying component data')
	correlated_nodes: int = Field(description='Nodes carrying accessibility data')
	metadata: dict[str, Any] = Field(default_factory=dict)


CorrelatedNode.model_rebuild()
