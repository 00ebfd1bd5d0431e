import os
from logging import getLogger
from gadget.lib.external import run_external
log = getLogger(__name__)


def mkfs_ext4(img_file: str, label: str, contents_root_dir: str):
	"""
	Create an ext4 filesystem in img_file populated from contents_root_dir
	"""
	cmds: list[str] = ["mkfs.ext4"]
	cmds.extend(["-T", "default"])
	cmds.extend(["-O", "^metadata_csum,^64bit"])
	cmds.extend(["-b", "4096"])
	if label: cmds.extend(["-L", label])
	if contents_root_dir and len(os.listdir(contents_root_dir)) > 0:
		cmds.extend(["-d", contents_root_dir])
	cmds.append(img_file)
	log.info(f"creating ext4 filesystem in {img_file}")
	ret = run_external(cmds)
	if ret != 0: raise OSError("mkfs.ext4 failed")
