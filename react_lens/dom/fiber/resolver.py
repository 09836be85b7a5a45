from pydantic import BaseModel

from react_lens.dom.fiber.naming import display_name, extract_source
from react_lens.dom.fiber.views import Fiber, OwnerInfo

DEFAULT_MAX_STEPS = 20
DEFAULT_MAX_OWNERS = 10

# Parent traversals allowed per owner collected; bounds walks through long
# runs of host/other fibers on malformed graphs.
OWNER_STEP_FACTOR = 50


class AncestorLookup(BaseModel):
	"""Outcome of an upward search. ``exhausted`` means the step budget ran out."""

	model_config = {'arbitrary_types_allowed': True}

	fiber: Fiber | None
	steps: int
	exhausted: bool = False

	@property
	def found(self) -> bool:
		return self.fiber is not None


def nearest_authored_ancestor(fiber: Fiber | None, max_steps: int = DEFAULT_MAX_STEPS) -> AncestorLookup:
	"""Return the fiber itself if authored, else the closest authored ancestor.

	At most ``max_steps`` parent traversals are made whatever the shape of
	the graph, so cyclic parent links terminate.
	"""
	if fiber is None:
		return AncestorLookup(fiber=None, steps=0)
	if fiber.kind.is_authored:
		return AncestorLookup(fiber=fiber, steps=0)

	current = fiber
	steps = 0
	while steps < max_steps:
		current = current.parent
		steps += 1
		if current is None:
			return AncestorLookup(fiber=None, steps=steps)
		if current.kind.is_authored:
			return AncestorLookup(fiber=current, steps=steps)
	return AncestorLookup(fiber=None, steps=steps, exhausted=True)


def owner_chain(fiber: Fiber, max_owners: int = DEFAULT_MAX_OWNERS) -> list[OwnerInfo]:
	"""Authored ancestors of ``fiber`` (exclusive), innermost first."""
	owners: list[OwnerInfo] = []
	visited: set[int] = {id(fiber)}
	step_budget = max_owners * OWNER_STEP_FACTOR
	current = fiber.parent
	while current is not None and len(owners) < max_owners and step_budget > 0:
		if id(current) in visited:
			break
		visited.add(id(current))
		step_budget -= 1
		if current.kind.is_authored:
			owners.append(OwnerInfo(name=display_name(current), type=current.kind, source=extract_source(current)))
		current = current.parent
	return owners
