from gadget.disk.filesystem.registry import MkfsFunc
from gadget.disk.filesystem.ext4 import mkfs_ext4
from gadget.disk.filesystem.vfat import mkfs_vfat


types: list[tuple[str, MkfsFunc]] = [
	("ext4",       mkfs_ext4),
	("vfat",       mkfs_vfat),
]
