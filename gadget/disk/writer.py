import os
from logging import getLogger
from typing import Callable
from gadget.lib.config import WriterOptions
from gadget.lib.errors import GadgetInternalError, GadgetWriteError
from gadget.disk.content import stage_content
from gadget.disk.structure import PositionedStructure
from gadget.disk.filesystem.registry import MkfsHandlers, MkfsFunc
from gadget.disk.staging import staging_dir_for, prepare_staging_dir, cleanup_staging_dir
log = getLogger(__name__)


# post_stage(staging_dir, ps), called before the filesystem is created
PostStageFunc = Callable[[str, PositionedStructure], None]


def _lookup_handler(ps: PositionedStructure) -> MkfsFunc:
	handler = MkfsHandlers.lookup(ps.filesystem)
	if handler is None: raise GadgetInternalError(
		f'filesystem "{ps.filesystem}" has no handler'
	)
	return handler


class FilesystemImageWriter:
	"""
	Build the filesystem image of one structure
	Content is staged into a private folder under work_dir, then handed
	to the mkfs handler registered for the structure filesystem
	"""
	content_dir: str
	ps: PositionedStructure
	work_dir: str
	options: WriterOptions | None

	def __init__(
		self,
		content_dir: str,
		ps: PositionedStructure,
		work_dir: str,
		options: WriterOptions = None,
	):
		if not content_dir: raise GadgetInternalError(
			"gadget content directory cannot be unset"
		)
		if ps is None: raise GadgetInternalError(
			"PositionedStructure is None"
		)
		if not ps.has_filesystem: raise GadgetInternalError(
			"structure has no filesystem"
		)
		_lookup_handler(ps)
		self.content_dir = content_dir
		self.ps = ps
		self.work_dir = work_dir
		self.options = options

	def check_image(self, img_file: str):
		try:
			st = os.stat(img_file)
		except OSError as e:
			raise GadgetWriteError(f"cannot stat image file: {e}") from e
		if st.st_size != self.ps.size: raise GadgetWriteError(
			f"size of image file {st.st_size} is different "
			f"from declared structure size {self.ps.size}"
		)

	def write(self, img_file: str, post_stage: PostStageFunc = None):
		# structure may have been changed since construction
		handler = _lookup_handler(self.ps)
		fstype = self.ps.filesystem
		self.check_image(img_file)

		stage = staging_dir_for(self.work_dir, self.ps)
		prepare_staging_dir(stage)
		try:
			try:
				stage_content(self.content_dir, self.ps, stage)
			except GadgetWriteError as e:
				raise GadgetWriteError(
					f"cannot prepare filesystem content: {e}"
				) from e

			if post_stage is not None:
				log.debug(f"running post stage callback on {stage}")
				try:
					post_stage(stage, self.ps)
				except Exception as e:
					raise GadgetWriteError(
						f"post stage callback failed: {e}"
					) from e

			log.info(f"creating {fstype} filesystem for structure #{self.ps.index}")
			try:
				handler(img_file, self.ps.label, stage)
			except Exception as e:
				raise GadgetWriteError(
					f'cannot create "{fstype}" filesystem: {e}'
				) from e
		finally:
			options = self.options
			if options is None: options = WriterOptions.from_environ()
			cleanup_staging_dir(stage, options)
		log.info(f"wrote {fstype} filesystem image {img_file}")
