import asyncio
import logging
from typing import Any

from pydantic import BaseModel, Field

from react_lens.cdp.channel import RuntimeChannel
from react_lens.config import InspectorProfile
from react_lens.dom.fiber.scripts import HOOK_BOOTSTRAP, HOOK_STATUS, LENS_TABLE_VERSION, invoke
from react_lens.dom.fiber.views import AttachResult, HookRegistration
from react_lens.exceptions import InstallationFailure, RuntimeEvaluationError

logger = logging.getLogger(__name__)


class HookStatus(BaseModel):
	installed: bool = False
	page_id: str | None = Field(None, description='performance.timeOrigin of the document; changes on every load')
	token: str | None = None
	version: int | None = None
	renderers: list[HookRegistration] = Field(default_factory=list)
	roots: dict[int, int] = Field(default_factory=dict, description='Renderer id -> committed root count')


class RegistrationTable(BaseModel):
	"""Renderers seen on the current page load.

	``merge`` is idempotent: merging the same status twice changes nothing,
	and a registration is only dropped when the page token changes (the page
	navigated and the hook in it was recreated).
	"""

	version: int = Field(0, description='Bumped whenever the table changes')
	token: str | None = Field(None, description='Identifies the page load the table belongs to')
	renderers: dict[int, HookRegistration] = Field(default_factory=dict)
	root_counts: dict[int, int] = Field(default_factory=dict)

	def merge(self, status: HookStatus) -> bool:
		changed = False
		if status.token != self.token:
			if self.token is not None:
				logger.debug(f'Page token changed {self.token} -> {status.token}, resetting registrations')
			self.token = status.token
			self.renderers = {}
			self.root_counts = {}
			changed = True

		for registration in status.renderers:
			if self.renderers.get(registration.id) != registration:
				self.renderers[registration.id] = registration
				changed = True

		for renderer_id, count in status.roots.items():
			if self.root_counts.get(renderer_id) != count:
				self.root_counts[renderer_id] = count
				changed = True

		if changed:
			self.version += 1
		return changed


class HookInstaller:
	"""Installs the introspection hook into one page and tracks its registrations."""

	def __init__(self, channel: RuntimeChannel, profile: InspectorProfile | None = None):
		self.channel = channel
		self.profile = profile or InspectorProfile()
		self.table = RegistrationTable()
		self._init_script_id: str | None = None
		# page load produced by our reload; a missing hook there is final
		self._reload_spent = False
		self._reloaded_page_id: str | None = None

	@property
	def bootstrap_source(self) -> str:
		return invoke(HOOK_BOOTSTRAP, self.profile.hook_global_name, LENS_TABLE_VERSION)

	async def read_status(self) -> HookStatus:
		raw: Any = await self.channel.evaluate(invoke(HOOK_STATUS, self.profile.hook_global_name))
		return HookStatus.model_validate(raw or {})

	async def _install_now(self) -> HookStatus:
		try:
			await self.channel.evaluate(self.bootstrap_source)
		except RuntimeEvaluationError as e:
			logger.warning(f'Runtime hook injection rejected: {e}')

		# the pre-navigation script may have installed the hook already
		try:
			return await self.read_status()
		except RuntimeEvaluationError as e:
			logger.warning(f'Reading hook status failed: {e}')
			return HookStatus(installed=False)

	def _reload_spent_on(self, status: HookStatus) -> bool:
		return self._reload_spent and status.page_id == self._reloaded_page_id

	async def ensure_installed(self) -> RegistrationTable:
		"""Install (or join) the hook; safe to call before and after navigation.

		A page where the hook is still missing after runtime injection is
		reloaded once so the pre-navigation script runs before React loads.
		The reload is not repeated for the page load it produced.
		"""
		try:
			await self.channel.set_bypass_csp(True)
			if self._init_script_id is None:
				self._init_script_id = await self.channel.add_script_on_new_document(self.bootstrap_source)

			status = await self._install_now()
			if not status.installed and not self._reload_spent_on(status):
				logger.info('Hook missing after runtime injection, reloading page once')
				self._reload_spent = True
				self._reloaded_page_id = None
				await self.channel.reload()
				await asyncio.sleep(self.profile.reload_settle_seconds)
				status = await self.read_status()
				self._reloaded_page_id = status.page_id
		except Exception as e:
			logger.error(f'Failed to install React hook: {e}')
			raise InstallationFailure(f'Failed to install React DevTools hook: {e}') from e

		if not status.installed:
			raise InstallationFailure(
				f'React DevTools hook {self.profile.hook_global_name} is missing after reload; script injection was rejected'
			)

		if self.table.merge(status):
			logger.debug(f'Registration table v{self.table.version}: {len(self.table.renderers)} renderers')
		return self.table

	async def attach(self) -> AttachResult:
		try:
			table = await self.ensure_installed()
		except InstallationFailure as e:
			return AttachResult(attached=False, renderers=[], message=str(e))
		return AttachResult(attached=True, renderers=list(table.renderers.values()))
