import os
import stat
import logging
from sys import stdout
from argparse import ArgumentParser
from gadget.lib.config import GadgetLayoutError, WriterOptions, load_layout
from gadget.disk.structure import PositionedStructure
from gadget.disk.writer import FilesystemImageWriter
from gadget.disk.filesystem.registry import MkfsHandlers
log = logging.getLogger(__name__)


def parse_arguments(argv: list[str] = None):
	parser = ArgumentParser(
		prog="gadget-image-writer",
		description="Build the filesystem image of one gadget structure",
	)
	parser.add_argument("-c", "--content",   help="Gadget content folder", required=True)
	parser.add_argument("-l", "--layout",    help="Gadget layout file", required=True)
	parser.add_argument("-s", "--structure", help="Structure name or 1-based index", required=True)
	parser.add_argument("-o", "--output",    help="Filesystem image file", required=True)
	parser.add_argument("-w", "--workspace", help="Work folder for staging", default=None)
	parser.add_argument("-V", "--volume",    help="Volume name, default to the only volume")
	parser.add_argument("-C", "--create",    help="Create image file with declared size", default=False, action='store_true')
	parser.add_argument("-k", "--keep",      help="Keep staging folder after build", default=False, action='store_true')
	parser.add_argument("-d", "--debug",     help="Enable debug logging", default=False, action='store_true')
	args = parser.parse_args(argv)

	# debug logging
	if args.debug:
		logging.root.setLevel(logging.DEBUG)
		log.debug("enabled debug logging")
	return args


def find_structure(
	volumes: dict[str, list[PositionedStructure]],
	volume: str | None,
	structure: str,
) -> PositionedStructure:
	if volume is None:
		if len(volumes) != 1: raise GadgetLayoutError(
			"layout has multiple volumes, select one with --volume"
		)
		volume = next(iter(volumes))
	if volume not in volumes:
		raise GadgetLayoutError(f"volume {volume} not found")
	for ps in volumes[volume]:
		if ps.name == structure or str(ps.index) == structure:
			return ps
	raise GadgetLayoutError(f"structure {structure} not found in volume {volume}")


def create_image(path: str, size: int):
	"""
	Create or replace a regular file with size bytes allocated
	"""
	if os.path.exists(path):
		st = os.stat(path)
		if not stat.S_ISREG(st.st_mode):
			raise GadgetLayoutError(f"target {path} is not a file")
		log.debug(f"target {path} exists, removing")
		os.remove(path)
	log.info(f"creating {path} with {size} bytes")
	fd = -1
	try:
		flags = os.O_RDWR | os.O_CREAT | os.O_TRUNC
		fd = os.open(path, flags=flags, mode=0o0644)
		os.posix_fallocate(fd, 0, size)
	finally:
		if fd >= 0: os.close(fd)


def main(argv: list[str] = None):
	logging.basicConfig(stream=stdout, level=logging.INFO)
	args = parse_arguments(argv)
	volumes = load_layout(args.layout)
	ps = find_structure(volumes, args.volume, args.structure)
	output = os.path.realpath(args.output)
	work = args.workspace
	if work is None: work = os.path.dirname(output)
	log.info(f"gadget content folder: {args.content}")
	log.info(f"workspace folder:      {work}")
	log.info(f"structure:             #{ps.index} {ps.name} ({ps.filesystem})")
	log.debug(f"available filesystems: {', '.join(MkfsHandlers.names())}")
	log.debug(f"selected structure:\n{ps.to_json(indent=2)}")
	options = WriterOptions.from_environ()
	if args.keep: options.keep_staging = True
	writer = FilesystemImageWriter(args.content, ps, work, options)
	if args.create: create_image(output, ps.size)
	writer.write(output)


if __name__ == "__main__":
	main()
