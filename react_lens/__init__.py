from react_lens.cdp.channel import RuntimeChannel
from react_lens.config import InspectorProfile
from react_lens.logging_config import setup_logging
from react_lens.service import ReactInspector
from react_lens.views import ToolFailure

__all__ = [
	'InspectorProfile',
	'ReactInspector',
	'RuntimeChannel',
	'ToolFailure',
	'setup_logging',
]
