import os
import shutil
from logging import getLogger
from gadget.lib.errors import GadgetWriteError
from gadget.disk.structure import VolumeContent, PositionedStructure
log = getLogger(__name__)


def _resolve(root: str, path: str) -> str:
	"""
	Resolve path inside root, it must not leave root
	_resolve("/stage", "/boot/../efi") = "/stage/efi"
	"""
	real = os.path.abspath(os.path.join(root, path.lstrip("/")))
	base = os.path.abspath(root)
	if os.path.commonpath([base, real]) != base:
		raise OSError(f"path {path} is outside of {root}")
	return real


def _copy_one(src: str, dst: str):
	if os.path.isdir(src):
		log.debug(f"copy folder {src} to {dst}")
		shutil.copytree(src, dst, symlinks=True, dirs_exist_ok=True)
	else:
		os.makedirs(os.path.dirname(dst), mode=0o0755, exist_ok=True)
		log.debug(f"copy file {src} to {dst}")
		shutil.copy2(src, dst, follow_symlinks=False)


def deploy_entry(source_root: str, entry: VolumeContent, target_root: str):
	"""
	Copy one content entry
	source "foo/": contents of folder foo go into target
	target "bar/": source goes into bar keeping its name
	"""
	src = _resolve(source_root, entry.source)
	dst = _resolve(target_root, entry.target)
	if entry.source.endswith("/"):
		if not os.path.isdir(src):
			raise NotADirectoryError(f"source {src} is not a folder")
		os.makedirs(dst, mode=0o0755, exist_ok=True)
		for name in sorted(os.listdir(src)):
			_copy_one(os.path.join(src, name), os.path.join(dst, name))
		return
	if not os.path.lexists(src):
		raise FileNotFoundError(2, "No such file or directory", src)
	if entry.target.endswith("/"):
		dst = os.path.join(dst, os.path.basename(src.rstrip("/")))
	_copy_one(src, dst)


def deploy_content(
	source_root: str,
	entries: list[VolumeContent],
	target_root: str,
):
	"""
	Deploy all entries in order into target_root
	"""
	for entry in entries:
		deploy_entry(source_root, entry, target_root)


def stage_content(source_root: str, ps: PositionedStructure, staging_dir: str):
	log.info(f"staging content of structure #{ps.index} into {staging_dir}")
	for entry in ps.content:
		try:
			deploy_content(source_root, [entry], staging_dir)
		except OSError as e:
			raise GadgetWriteError(
				f"cannot write filesystem content of {entry}: {e}"
			) from e
	log.debug(f"staged {len(ps.content)} content entries")
