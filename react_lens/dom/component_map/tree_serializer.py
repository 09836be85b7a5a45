# @file purpose: Renders the merged component/accessibility tree as an indented text block for agents

import json

from react_lens.dom.component_map.views import ComponentMapResponse, CorrelatedNode
from react_lens.dom.fiber.views import ComponentDescriptor

TREE_HEADER = 'React Component Tree:'
BRANCH = '├─ '
LAST_BRANCH = '└─ '
PIPE = '│  '
SPACE = '   '

MAX_INLINE_STATE = 50
MAX_NAME_LENGTH = 80


class ComponentMapSerializer:
	"""Serializes a component map to box-drawing text, one line per node."""

	def to_text(self, response: ComponentMapResponse) -> str:
		lines = [TREE_HEADER, '']
		lines.extend(self.render_lines(response.root.children))
		return '\n'.join(lines)

	def render_lines(self, top_level: list[CorrelatedNode]) -> list[str]:
		"""Pre-order lines; top-level nodes carry no connector."""
		lines: list[str] = []
		# (node, line prefix, prefix inherited by the node's children)
		stack: list[tuple[CorrelatedNode, str, str]] = [(node, '', '') for node in reversed(top_level)]
		while stack:
			node, line_prefix, child_prefix = stack.pop()
			lines.append(line_prefix + self.format_node(node))

			last_index = len(node.children) - 1
			for index in range(last_index, -1, -1):
				is_last = index == last_index
				stack.append(
					(
						node.children[index],
						child_prefix + (LAST_BRANCH if is_last else BRANCH),
						child_prefix + (SPACE if is_last else PIPE),
					)
				)
		return lines

	def format_node(self, node: CorrelatedNode) -> str:
		if node.component is not None:
			return self._format_component(node, node.component)
		return self._format_host(node)

	def _format_component(self, node: CorrelatedNode, component: ComponentDescriptor) -> str:
		line = component.name

		if node.props_summary:
			line += f' {{{", ".join(node.props_summary)}}}'

		if component.state is not None:
			state_str = json.dumps(component.state, separators=(',', ':'), default=str)
			line += f' state={state_str}' if len(state_str) < MAX_INLINE_STATE else ' state={...}'

		if component.source is not None and component.source.file_name:
			line += f' ({component.source})'

		return line

	def _format_host(self, node: CorrelatedNode) -> str:
		role = node.get_accessibility_role() or 'generic'
		line = f'[{role}]'
		name = node.get_accessibility_name()
		if name:
			name = name.strip()
			if len(name) > MAX_NAME_LENGTH:
				name = name[:MAX_NAME_LENGTH] + '...'
			line += f' "{name}"'
		return line
