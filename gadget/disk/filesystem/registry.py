from contextlib import contextmanager
from logging import getLogger
from typing import Callable, Iterator
log = getLogger(__name__)


# mkfs(img_file, label, contents_root_dir), raises on failure
MkfsFunc = Callable[[str, str, str], None]


class MkfsHandlers:
	"""
	Process-wide table from filesystem type name to builder
	"""
	handlers: dict[str, MkfsFunc] = None

	@staticmethod
	def init():
		if MkfsHandlers.handlers is not None: return
		from gadget.disk.filesystem.types import types
		MkfsHandlers.handlers = dict(types)

	@staticmethod
	def register(name: str, handler: MkfsFunc):
		MkfsHandlers.init()
		log.debug(f"register mkfs handler for {name}")
		MkfsHandlers.handlers[name] = handler

	@staticmethod
	def lookup(name: str) -> MkfsFunc | None:
		MkfsHandlers.init()
		return MkfsHandlers.handlers.get(name)

	@staticmethod
	def names() -> list[str]:
		MkfsHandlers.init()
		return sorted(MkfsHandlers.handlers.keys())

	@staticmethod
	def mock(handlers: dict[str, MkfsFunc]) -> Callable[[], None]:
		"""
		Replace the whole table, returns a function restoring the previous one
		The restore function must be called exactly once
		"""
		MkfsHandlers.init()
		old = MkfsHandlers.handlers
		MkfsHandlers.handlers = dict(handlers)
		restored = False

		def restore():
			nonlocal restored
			if restored: raise RuntimeError("mkfs handlers already restored")
			restored = True
			MkfsHandlers.handlers = old
		return restore

	@staticmethod
	@contextmanager
	def mocked(handlers: dict[str, MkfsFunc]) -> Iterator[None]:
		restore = MkfsHandlers.mock(handlers)
		try: yield
		finally: restore()
