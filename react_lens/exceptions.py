class ReactLensError(Exception):
	"""Base class for errors raised while inspecting a page."""


class InstallationFailure(ReactLensError):
	"""The introspection hook could not be installed into the page."""


class RuntimeEvaluationError(ReactLensError):
	"""A script evaluated inside the page threw or returned an unusable result."""


class ComponentNotFound(ReactLensError):
	"""A component id, backend node id or root did not resolve."""

	def __init__(self, message: str, searched: str | int | None = None):
		super().__init__(message)
		self.searched = searched
