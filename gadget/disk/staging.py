import os
import shutil
from logging import getLogger
from gadget.lib.config import WriterOptions
from gadget.lib.errors import GadgetWriteError
from gadget.disk.structure import PositionedStructure
log = getLogger(__name__)


STAGING_PREFIX = "stage-content-part-"


def staging_dir_for(work_dir: str, ps: PositionedStructure) -> str:
	"""
	Staging folder for a structure, named by its 1-based index
	staging_dir_for("/work", ps) = "/work/stage-content-part-0002" (ps.index = 2)
	"""
	return os.path.join(work_dir, f"{STAGING_PREFIX}{ps.index:04d}")


def prepare_staging_dir(path: str):
	"""
	Create the staging folder, it must not exist yet
	Parent folders are never created
	"""
	log.debug(f"create staging folder {path}")
	try:
		os.mkdir(path, mode=0o0755)
	except FileExistsError as e:
		raise GadgetWriteError(
			f"cannot prepare staging directory {path}: path exists"
		) from e
	except OSError as e:
		raise GadgetWriteError(f"cannot prepare staging directory: {e}") from e


def cleanup_staging_dir(path: str, options: WriterOptions):
	if options.keep_staging:
		log.warning(f"keeping staging folder {path}")
		return
	log.debug(f"remove staging folder {path}")
	try: shutil.rmtree(path)
	except OSError: log.warning(f"failed to remove staging folder {path}", exc_info=1)
