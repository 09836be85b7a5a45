import os

from pydantic import BaseModel, Field

HOOK_GLOBAL_NAME = '__REACT_DEVTOOLS_GLOBAL_HOOK__'
DEFAULT_CDP_URL = 'http://localhost:9222'


class InspectorProfile(BaseModel):
	"""Limits and connection settings for one inspector.

	Every traversal bound lives here so the tool-call layer can pass the same
	profile to every operation.
	"""

	cdp_url: str = Field(default=DEFAULT_CDP_URL, description='HTTP endpoint of the DevTools protocol')
	hook_global_name: str = Field(default=HOOK_GLOBAL_NAME, description='Global the React hook is published under')
	reload_settle_seconds: float = Field(default=1.0, ge=0, description='Wait after the one install reload')

	# ancestor / owner walks
	max_ancestor_steps: int = Field(default=20, ge=1, description='Parent traversals when resolving a host node')
	max_owners: int = Field(default=10, ge=1, description='Owner chain entries collected per component')

	# component listing
	list_depth: int = Field(default=3, ge=1, le=10, description='Depth to traverse from each root')
	list_max_nodes: int = Field(default=200, ge=1, le=2000, description='Maximum components listed')
	root_node_count_limit: int = Field(default=2000, ge=1, description='Cap when counting fibers under a root')

	# safe serializer
	serialize_depth: int = Field(default=3, ge=0, description='Depth for props/state serialization')
	serialize_max_properties: int = Field(default=50, ge=1)
	serialize_max_array_items: int = Field(default=100, ge=1)

	# page-side export of the fiber graph
	max_exported_fibers: int = Field(default=20000, ge=1, description='Fibers exported from the page per call')
	export_depth: int = Field(default=6, ge=1, description='Nesting exported for props/state values')
	export_keys: int = Field(default=100, ge=1, description='Keys exported per object')
	export_items: int = Field(default=200, ge=1, description='Items exported per array')

	@classmethod
	def from_env(cls, **overrides) -> 'InspectorProfile':
		"""Build a profile from ``REACT_LENS_*`` environment variables."""
		values: dict[str, object] = {}
		for name in cls.model_fields:
			env_value = os.getenv(f'REACT_LENS_{name.upper()}')
			if env_value is not None:
				values[name] = env_value
		values.update(overrides)
		return cls.model_validate(values)
