import os
from logging import getLogger
from gadget.lib.external import run_external
log = getLogger(__name__)


def mkfs_vfat(img_file: str, label: str, contents_root_dir: str):
	"""
	Create a FAT32 filesystem in img_file and copy contents_root_dir into it
	"""
	cmds: list[str] = ["mkfs.vfat"]
	cmds.extend(["-S", "512"])
	cmds.extend(["-s", "1"])
	cmds.extend(["-F", "32"])
	if label: cmds.extend(["-n", label])
	cmds.append(img_file)
	log.info(f"creating vfat filesystem in {img_file}")
	ret = run_external(cmds)
	if ret != 0: raise OSError("mkfs.vfat failed")

	if not contents_root_dir: return
	entries = sorted(os.listdir(contents_root_dir))
	if len(entries) == 0: return
	cmds = ["mcopy", "-s", "-i", img_file]
	cmds.extend(os.path.join(contents_root_dir, name) for name in entries)
	cmds.append("::")
	log.debug(f"copying {len(entries)} entries into {img_file}")
	ret = run_external(cmds)
	if ret != 0: raise OSError("mcopy failed")
