from typing import Literal

from pydantic import BaseModel, Field

from react_lens.dom.a11y.views import AccessibilitySnapshot
from react_lens.dom.component_map.views import ComponentMapResponse
from react_lens.dom.fiber.views import ComponentDescriptor, ComponentSummary, HookRegistration, RootInfo


class ToolFailure(BaseModel):
	"""Structured failure returned instead of raising across the tool boundary."""

	success: Literal[False] = False
	error: str


class ToolSuccess(BaseModel):
	success: Literal[True] = True


class AttachResponse(ToolSuccess):
	attached: bool
	renderers: list[HookRegistration] = Field(default_factory=list)
	message: str | None = None


class RootsResponse(ToolSuccess):
	roots: list[RootInfo]


class ComponentsResponse(ToolSuccess):
	components: list[ComponentSummary]


class ComponentResponse(ToolSuccess):
	component: ComponentDescriptor


class BackendNodeComponentResponse(ToolSuccess):
	"""Component that rendered a DOM node; ``component`` is None when the bounded walk found none."""

	backend_node_id: int
	component: ComponentDescriptor | None = None
	steps: int = Field(0, description='Parent traversals made')
	exhausted: bool = Field(False, description='The step budget ran out before an authored fiber was found')


class SnapshotResponse(ToolSuccess):
	snapshot: AccessibilitySnapshot


class ComponentMapResult(ToolSuccess):
	text: str
	tree: ComponentMapResponse


class HighlightResponse(ToolSuccess):
	component_id: str
	backend_node_id: int
	message: str
