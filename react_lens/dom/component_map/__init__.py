from .processor import ComponentMapProcessor
from .tree_serializer import ComponentMapSerializer
from .views import ComponentMapResponse, CorrelatedNode

__all__ = [
	'ComponentMapProcessor',
	'ComponentMapSerializer',
	'ComponentMapResponse',
	'CorrelatedNode',
]
