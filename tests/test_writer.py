import os
import glob
import pytest
from conftest import make_sized_file, make_content
from gadget.lib.config import WriterOptions
from gadget.lib.errors import GadgetInternalError, GadgetWriteError
from gadget.disk.structure import SIZE_MIB, VolumeContent, VolumeStructure, PositionedStructure
from gadget.disk.writer import FilesystemImageWriter
from gadget.disk.filesystem.registry import MkfsHandlers


def img_for(tmp_path, ps: PositionedStructure) -> str:
	img = str(tmp_path / "img")
	make_sized_file(img, ps.size)
	return img


def unexpected(*args):
	raise AssertionError("unexpected call")


def test_simple_errors(tmp_path):
	valid = PositionedStructure(VolumeStructure(filesystem="ext4", size=2 * SIZE_MIB))
	with pytest.raises(GadgetInternalError, match="^internal error: gadget content directory cannot be unset$"):
		FilesystemImageWriter("", valid, "")

	with pytest.raises(GadgetInternalError, match="^internal error: PositionedStructure is None$"):
		FilesystemImageWriter(str(tmp_path), None, "")

	no_fs = PositionedStructure(VolumeStructure(filesystem="none", size=2 * SIZE_MIB))
	with pytest.raises(GadgetInternalError, match="^internal error: structure has no filesystem$"):
		FilesystemImageWriter(str(tmp_path), no_fs, "")

	bad_fs = PositionedStructure(VolumeStructure(filesystem="xfs", size=2 * SIZE_MIB))
	with pytest.raises(GadgetInternalError, match='^internal error: filesystem "xfs" has no handler$'):
		FilesystemImageWriter(str(tmp_path), bad_fs, "")


def test_happy_full(tmp_path, work, content):
	vs = VolumeStructure(
		filesystem="happyfs",
		label="so-happy",
		size=2 * SIZE_MIB,
		content=[VolumeContent(source="/foo", target="/")],
	)
	ps = PositionedStructure(vs, index=2)
	img = img_for(tmp_path, ps)
	make_content(content, {"foo": "hello foo"})
	stage = os.path.join(work, "stage-content-part-0002")
	calls = []

	def cb(root_dir, cb_ps):
		assert cb_ps is ps
		assert root_dir == stage
		with open(os.path.join(root_dir, "foo")) as f:
			assert f.read() == "hello foo"
		calls.append("cb")

	def mkfs_happyfs(img_file, label, contents_root_dir):
		assert img_file == img
		assert label == "so-happy"
		assert contents_root_dir == stage
		calls.append("mkfs")

	with MkfsHandlers.mocked({"happyfs": mkfs_happyfs}):
		fiw = FilesystemImageWriter(content, ps, work)
		fiw.write(img, cb)

	assert calls == ["cb", "mkfs"]
	# nothing left in temporary staging location
	assert glob.glob(work + "/*") == []


def test_post_stage_optional(tmp_path, work, content, ps_trivial):
	called = []
	with MkfsHandlers.mocked({"happyfs": lambda *args: called.append(args)}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = img_for(tmp_path, ps_trivial)
		fiw.write(img, None)
	assert len(called) == 1


def test_checks_image(tmp_path, work, content, ps_trivial):
	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = str(tmp_path / "img")

		# no image file
		with pytest.raises(GadgetWriteError, match=r"^cannot stat image file: .*No such file or directory.*/img"):
			fiw.write(img, unexpected)
		assert os.listdir(work) == []

		# image file smaller than expected
		make_sized_file(img, ps_trivial.size // 2)
		with pytest.raises(GadgetWriteError) as e:
			fiw.write(img, unexpected)
		assert str(e.value) == (
			f"size of image file {ps_trivial.size // 2} is different "
			f"from declared structure size {ps_trivial.size}"
		)

		# image file larger than expected
		make_sized_file(img, ps_trivial.size + 1)
		with pytest.raises(GadgetWriteError, match=f"^size of image file {ps_trivial.size + 1} "):
			fiw.write(img, unexpected)
		assert os.listdir(work) == []


def test_post_stage_error(tmp_path, work, content, ps_trivial):
	def cb(root_dir, cb_ps):
		raise RuntimeError("post stage exploded")

	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = img_for(tmp_path, ps_trivial)
		with pytest.raises(GadgetWriteError, match="^post stage callback failed: post stage exploded$") as e:
			fiw.write(img, cb)
	assert isinstance(e.value.__cause__, RuntimeError)
	assert os.listdir(work) == []


def test_mkfs_error(tmp_path, work, content, ps_trivial):
	def mkfs_happyfs(img_file, label, contents_root_dir):
		raise OSError("will not mkfs")

	with MkfsHandlers.mocked({"happyfs": mkfs_happyfs}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = img_for(tmp_path, ps_trivial)
		with pytest.raises(GadgetWriteError, match='^cannot create "happyfs" filesystem: will not mkfs$'):
			fiw.write(img, None)
	assert os.listdir(work) == []


def test_filesystem_rechecked_on_write(tmp_path, work, content):
	vs = VolumeStructure(filesystem="happyfs", size=2 * SIZE_MIB)
	ps = PositionedStructure(vs, index=1)
	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps, work)
		img = img_for(tmp_path, ps)

		# modify filesystem
		vs.filesystem = "foofs"

		with pytest.raises(GadgetInternalError, match='^internal error: filesystem "foofs" has no handler$'):
			fiw.write(img, None)


def test_missing_content_error(tmp_path, work, content):
	vs = VolumeStructure(
		filesystem="happyfs",
		size=2 * SIZE_MIB,
		content=[VolumeContent(source="/foo", target="/")],
	)
	ps = PositionedStructure(vs, index=1)
	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps, work)
		img = img_for(tmp_path, ps)

		# declared content does not exist in the content directory
		with pytest.raises(
			GadgetWriteError,
			match="^cannot prepare filesystem content: cannot write filesystem content of source:/foo: .*No such file or directory",
		):
			fiw.write(img, unexpected)
	assert os.listdir(work) == []


def test_bad_work_dir_error(tmp_path, content, ps_trivial):
	bad_work = str(tmp_path / "bad-work")
	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps_trivial, bad_work)
		img = img_for(tmp_path, ps_trivial)

		with pytest.raises(
			GadgetWriteError,
			match="^cannot prepare staging directory: .*No such file or directory.*/bad-work/stage-content-part-0001",
		):
			fiw.write(img, unexpected)

		stage = os.path.join(bad_work, "stage-content-part-0001")
		os.makedirs(stage)
		with pytest.raises(GadgetWriteError) as e:
			fiw.write(img, unexpected)
		assert str(e.value) == f"cannot prepare staging directory {stage}: path exists"

	# pre-existing folder is not ours to remove
	assert os.path.isdir(stage)


def test_keeps_staging_dir(tmp_path, work, content, ps_trivial, monkeypatch):
	with MkfsHandlers.mocked({"happyfs": lambda *args: None}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = img_for(tmp_path, ps_trivial)

		monkeypatch.setenv("GADGET_DEBUG_IMAGE_NO_CLEANUP", "1")
		fiw.write(img, lambda root_dir, ps: None)

	matches = glob.glob(work + "/*")
	assert len(matches) == 1
	assert os.path.isdir(os.path.join(work, "stage-content-part-0001"))


def test_explicit_options_override_environment(tmp_path, work, content, ps_trivial, monkeypatch):
	monkeypatch.setenv("GADGET_DEBUG_IMAGE_NO_CLEANUP", "1")
	with MkfsHandlers.mocked({"happyfs": lambda *args: None}):
		fiw = FilesystemImageWriter(content, ps_trivial, work, WriterOptions(keep_staging=False))
		fiw.write(img_for(tmp_path, ps_trivial))
	assert os.listdir(work) == []


def test_write_is_repeatable(tmp_path, work, content, ps_trivial):
	seen = []
	with MkfsHandlers.mocked({"happyfs": lambda img, label, root: seen.append(root)}):
		fiw = FilesystemImageWriter(content, ps_trivial, work)
		img = img_for(tmp_path, ps_trivial)
		fiw.write(img)
		fiw.write(img)
	assert seen[0] == seen[1] == os.path.join(work, "stage-content-part-0001")
	assert os.listdir(work) == []


def test_content_outside_staging_rejected(tmp_path, work, content):
	vs = VolumeStructure(
		filesystem="happyfs",
		size=2 * SIZE_MIB,
		content=[VolumeContent(source="foo", target="../leak")],
	)
	ps = PositionedStructure(vs, index=1)
	make_content(content, {"foo": "hello foo"})
	with MkfsHandlers.mocked({"happyfs": unexpected}):
		fiw = FilesystemImageWriter(content, ps, work)
		img = img_for(tmp_path, ps)
		with pytest.raises(
			GadgetWriteError,
			match="^cannot prepare filesystem content: cannot write filesystem content of source:foo: .*outside of",
		):
			fiw.write(img, unexpected)
	assert os.listdir(work) == []
