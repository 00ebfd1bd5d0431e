import yaml
from logging import getLogger
from gadget.lib.utils import env_bool, size_to_bytes
from gadget.disk.structure import VolumeContent, VolumeStructure, PositionedStructure
log = getLogger(__name__)


NO_CLEANUP_ENV = "GADGET_DEBUG_IMAGE_NO_CLEANUP"


class GadgetLayoutError(Exception):
	pass


class WriterOptions:

	"""
	Keep staging directories after write for inspection
	"""
	keep_staging: bool = False

	def __init__(self, keep_staging: bool = False):
		self.keep_staging = keep_staging

	@staticmethod
	def from_environ():
		return WriterOptions(keep_staging=env_bool(NO_CLEANUP_ENV))


def _get_str(cfg: dict, key: str, default: str = "") -> str:
	"""
	Read a string field, yaml turns unquoted numbers into int
	_get_str({"filesystem-label": 2024}, "filesystem-label") = "2024"
	"""
	val = cfg.get(key, default)
	if type(val) is int: val = str(val)
	if type(val) is not str:
		raise GadgetLayoutError(f"bad type for {key}")
	return val


def _parse_content(entry: dict) -> VolumeContent:
	if type(entry) is not dict:
		raise GadgetLayoutError("bad type for content entry")
	if "source" not in entry:
		raise GadgetLayoutError("no source set in content entry")
	if "target" not in entry:
		raise GadgetLayoutError("no target set in content entry")
	content = VolumeContent(
		source=_get_str(entry, "source"),
		target=_get_str(entry, "target"),
	)
	for path in (content.source, content.target):
		if ".." in path.split("/"):
			raise GadgetLayoutError(f"invalid content path {path}")
	return content


def _parse_structure(cfg: dict) -> VolumeStructure:
	if type(cfg) is not dict:
		raise GadgetLayoutError("bad type for structure")
	if "size" not in cfg:
		raise GadgetLayoutError("no size set in structure")
	label = ""
	if "filesystem-label" in cfg: label = _get_str(cfg, "filesystem-label")
	elif "label" in cfg: label = _get_str(cfg, "label")
	size = cfg["size"]
	try: size = size_to_bytes(size if type(size) is int else str(size))
	except ValueError as e:
		raise GadgetLayoutError(f"bad size {size}") from e
	vs = VolumeStructure(
		name=_get_str(cfg, "name"),
		label=label,
		filesystem=_get_str(cfg, "filesystem", "none"),
		size=size,
		content=[_parse_content(c) for c in cfg.get("content", [])],
	)
	if vs.size <= 0:
		raise GadgetLayoutError(f"invalid size {cfg['size']}")
	return vs


def parse_layout(loaded: dict) -> dict[str, list[PositionedStructure]]:
	"""
	Convert a loaded layout into positioned structures per volume
	Structure index is the 1-based position within its volume
	"""
	if type(loaded) is not dict or "volumes" not in loaded:
		raise GadgetLayoutError("no volumes set in layout")
	volumes: dict[str, list[PositionedStructure]] = {}
	for name, volume in loaded["volumes"].items():
		if type(volume) is not dict or "structure" not in volume:
			raise GadgetLayoutError(f"no structure set in volume {name}")
		positioned = []
		offset = 0
		for idx, cfg in enumerate(volume["structure"]):
			vs = _parse_structure(cfg)
			ps = PositionedStructure(vs, index=idx + 1, start_offset=offset)
			log.debug(f"volume {name} structure #{ps.index} {vs.name} at {offset}")
			offset += vs.size
			positioned.append(ps)
		volumes[name] = positioned
	return volumes


def load_layout(path: str) -> dict[str, list[PositionedStructure]]:
	"""
	Load a layout (yaml/json) file
	"""
	log.debug(f"try to open layout {path}")
	try:
		with open(path, "r") as f:
			loaded = yaml.safe_load(f)
		log.info(f"loaded layout {path}")
	except BaseException:
		log.error(f"failed to load layout {path}")
		raise
	return parse_layout(loaded)
