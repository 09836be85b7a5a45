import logging
import os
import sys

RESULT_LEVEL = 35


def addLoggingLevel(levelName: str, levelNum: int, methodName: str | None = None) -> None:
	"""Add a new logging level to the `logging` module, e.g. ``logger.result(...)``."""
	if not methodName:
		methodName = levelName.lower()

	if hasattr(logging, levelName) or hasattr(logging.getLoggerClass(), methodName):
		return

	def logForLevel(self, message, *args, **kwargs):
		if self.isEnabledFor(levelNum):
			self._log(levelNum, message, args, **kwargs)

	def logToRoot(message, *args, **kwargs):
		logging.log(levelNum, message, *args, **kwargs)

	logging.addLevelName(levelNum, levelName)
	setattr(logging, levelName, levelNum)
	setattr(logging.getLoggerClass(), methodName, logForLevel)
	setattr(logging, methodName, logToRoot)


def setup_logging(level: str | None = None) -> logging.Logger:
	"""Configure the ``react_lens`` logger from ``REACT_LENS_LOGGING_LEVEL`` (debug|info|result)."""
	addLoggingLevel('RESULT', RESULT_LEVEL)

	log_type = (level or os.getenv('REACT_LENS_LOGGING_LEVEL', 'info')).lower()

	class ReactLensFormatter(logging.Formatter):
		def format(self, record):
			if isinstance(record.name, str) and record.name.startswith('react_lens.'):
				record.name = record.name.split('.')[-2] if record.name.count('.') > 1 else record.name.split('.')[-1]
			return super().format(record)

	console = logging.StreamHandler(sys.stdout)
	if log_type == 'result':
		console.setLevel(RESULT_LEVEL)
		console.setFormatter(ReactLensFormatter('%(message)s'))
	else:
		console.setFormatter(ReactLensFormatter('%(levelname)-8s [%(name)s] %(message)s'))

	lens_logger = logging.getLogger('react_lens')
	lens_logger.handlers.clear()
	lens_logger.addHandler(console)
	lens_logger.propagate = False
	if log_type == 'debug':
		lens_logger.setLevel(logging.DEBUG)
	elif log_type == 'result':
		lens_logger.setLevel(RESULT_LEVEL)
	else:
		lens_logger.setLevel(logging.INFO)

	# Silence third-party protocol chatter
	for noisy in ('cdp_use', 'cdp_use.client', 'websockets', 'httpx', 'asyncio'):
		third_party = logging.getLogger(noisy)
		third_party.setLevel(logging.WARNING)
		third_party.propagate = False

	return lens_logger
