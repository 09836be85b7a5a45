"""
Accessibility tree reader for react-lens.

Rebuilds the flat node list returned by the Chrome DevTools Protocol
Accessibility.getFullAXTree call into a rooted hierarchy with snapshot-scoped uids.
"""

from .service import A11yService
from .views import (
	AccessibilityNode,
	AccessibilitySnapshot,
	AXNode,
)

__all__ = [
	'A11yService',
	'AccessibilityNode',
	'AccessibilitySnapshot',
	'AXNode',
]
