import logging
from typing import Any

from cdp_use import CDPClient
from cdp_use.cdp.accessibility.commands import GetFullAXTreeReturns

from react_lens.exceptions import RuntimeEvaluationError

logger = logging.getLogger(__name__)


class RuntimeChannel:
	"""Round trips into one inspected page over an attached CDP session."""

	def __init__(self, cdp: CDPClient, session_id: str | None = None):
		self.cdp = cdp
		self.session_id = session_id
		self._domains_enabled = False

	@classmethod
	async def from_page_target(cls, cdp: CDPClient, url: str | None = None) -> 'RuntimeChannel':
		"""Attach to the first page target (the one showing ``url`` when given)."""
		targets = await cdp.send.Target.getTargets()
		for target in targets['targetInfos']:
			if target['type'] != 'page':
				continue
			if url is not None and target['url'] != url:
				continue
			session = await cdp.send.Target.attachToTarget(params={'targetId': target['targetId'], 'flatten': True})
			logger.debug(f'Attached to target {target["targetId"]} ({target["url"]})')
			return cls(cdp, session['sessionId'])

		raise ValueError(f'No page target found for {url or "any url"}')

	async def enable_domains(self) -> None:
		if self._domains_enabled:
			return
		await self.cdp.send.Runtime.enable(session_id=self.session_id)
		await self.cdp.send.DOM.enable(session_id=self.session_id)
		await self.cdp.send.Accessibility.enable(session_id=self.session_id)
		self._domains_enabled = True

	async def evaluate(self, expression: str, return_by_value: bool = True, object_group: str | None = None) -> Any:
		"""Evaluate ``expression`` in the page.

		Returns the JSON value, or the remote object id when ``return_by_value`` is false.
		"""
		params: dict[str, Any] = {
			'expression': expression,
			'returnByValue': return_by_value,
			'awaitPromise': True,
		}
		if object_group:
			params['objectGroup'] = object_group
		response = await self.cdp.send.Runtime.evaluate(params=params, session_id=self.session_id)
		return self._unwrap(response, return_by_value)

	async def call_function_on(self, object_id: str, declaration: str, return_by_value: bool = True) -> Any:
		response = await self.cdp.send.Runtime.callFunctionOn(
			params={
				'objectId': object_id,
				'functionDeclaration': declaration,
				'returnByValue': return_by_value,
			},
			session_id=self.session_id,
		)
		return self._unwrap(response, return_by_value)

	async def get_array_object_ids(self, object_id: str) -> list[str | None]:
		"""Remote object ids of an array's elements, in index order."""
		response = await self.cdp.send.Runtime.getProperties(
			params={'objectId': object_id, 'ownProperties': True},
			session_id=self.session_id,
		)
		indexed: dict[int, str | None] = {}
		for prop in response.get('result', []):
			if not prop['name'].isdigit():
				continue
			value = prop.get('value') or {}
			indexed[int(prop['name'])] = value.get('objectId')
		return [indexed.get(i) for i in range(len(indexed))]

	async def describe_backend_node_id(self, object_id: str) -> int | None:
		response = await self.cdp.send.DOM.describeNode(params={'objectId': object_id}, session_id=self.session_id)
		node = response.get('node') or {}
		return node.get('backendNodeId')

	async def release_object_group(self, object_group: str) -> None:
		try:
			await self.cdp.send.Runtime.releaseObjectGroup(params={'objectGroup': object_group}, session_id=self.session_id)
		except Exception as e:
			logger.warning(f'Failed to release object group {object_group}: {e}')

	async def add_script_on_new_document(self, source: str) -> str:
		response = await self.cdp.send.Page.addScriptToEvaluateOnNewDocument(
			params={'source': source}, session_id=self.session_id
		)
		return response['identifier']

	async def set_bypass_csp(self, enabled: bool = True) -> None:
		await self.cdp.send.Page.setBypassCSP(params={'enabled': enabled}, session_id=self.session_id)

	async def reload(self) -> None:
		await self.cdp.send.Page.reload(params={'ignoreCache': False}, session_id=self.session_id)

	async def get_full_ax_tree(self) -> GetFullAXTreeReturns:
		await self.enable_domains()
		return await self.cdp.send.Accessibility.getFullAXTree(session_id=self.session_id)

	async def highlight_backend_node(self, backend_node_id: int) -> None:
		await self.cdp.send.Overlay.enable(session_id=self.session_id)
		await self.cdp.send.Overlay.highlightNode(
			params={
				'highlightConfig': {
					'showInfo': True,
					'contentColor': {'r': 97, 'g': 218, 'b': 251, 'a': 0.35},
					'borderColor': {'r': 97, 'g': 218, 'b': 251, 'a': 0.9},
				},
				'backendNodeId': backend_node_id,
			},
			session_id=self.session_id,
		)

	def _unwrap(self, response: dict, return_by_value: bool) -> Any:
		if 'exceptionDetails' in response and response['exceptionDetails']:
			details = response['exceptionDetails']
			exception = details.get('exception') or {}
			message = exception.get('description') or details.get('text') or 'unknown error'
			raise RuntimeEvaluationError(f'Page script failed: {message}')

		result = response.get('result') or {}
		if return_by_value:
			return result.get('value')
		return result.get('objectId')
