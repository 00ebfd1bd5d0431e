from gadget.lib.serializable import SerializableDict
from gadget.lib.utils import size_to_bytes


SIZE_KIB = 1 << 10
SIZE_MIB = 1 << 20
SIZE_GIB = 1 << 30


class VolumeContent(SerializableDict):
	"""
	One source to target mapping deployed into a filesystem
	"""
	source: str = ""
	target: str = ""

	def __init__(self, source: str = "", target: str = ""):
		self.source = source
		self.target = target

	def __str__(self) -> str:
		return f"source:{self.source}"


class VolumeStructure(SerializableDict):
	"""
	One declared structure of a gadget volume
	"""
	name: str = ""
	label: str = ""
	filesystem: str = ""
	size: int = 0
	content: list[VolumeContent] = []

	def __init__(
		self,
		name: str = "",
		label: str = "",
		filesystem: str = "",
		size: int | str = 0,
		content: list[VolumeContent] = None,
	):
		self.name = name
		self.label = label
		self.filesystem = filesystem
		self.size = size_to_bytes(size)
		self.content = content if content is not None else []

	@property
	def has_filesystem(self) -> bool:
		return self.filesystem not in ("", "none")


class PositionedStructure(SerializableDict):
	"""
	A structure placed in its volume
	Holds the structure by reference, reads and writes go through to it
	"""
	structure: VolumeStructure = None
	index: int = 0
	start_offset: int = 0

	def __init__(
		self,
		structure: VolumeStructure,
		index: int = 0,
		start_offset: int = 0,
	):
		self.structure = structure
		self.index = index
		self.start_offset = start_offset

	@property
	def name(self) -> str: return self.structure.name

	@property
	def label(self) -> str: return self.structure.label

	@property
	def size(self) -> int: return self.structure.size

	@property
	def content(self) -> list[VolumeContent]: return self.structure.content

	@property
	def filesystem(self) -> str: return self.structure.filesystem

	@filesystem.setter
	def filesystem(self, value: str): self.structure.filesystem = value

	@property
	def has_filesystem(self) -> bool: return self.structure.has_filesystem

	def to_dict(self) -> dict:
		return {
			"structure": self.structure,
			"index": self.index,
			"start_offset": self.start_offset,
		}
