import os
import pytest
from gadget.disk.structure import SIZE_MIB, VolumeStructure, PositionedStructure


def make_sized_file(path: str, size: int):
	with open(path, "wb") as f:
		f.truncate(size)


def make_content(root: str, files: dict[str, str]):
	for name, data in files.items():
		path = os.path.join(root, name)
		os.makedirs(os.path.dirname(path), exist_ok=True)
		with open(path, "w") as f:
			f.write(data)


@pytest.fixture
def work(tmp_path) -> str:
	path = tmp_path / "work"
	path.mkdir()
	return str(path)


@pytest.fixture
def content(tmp_path) -> str:
	return str(tmp_path / "content")


@pytest.fixture
def ps_trivial() -> PositionedStructure:
	vs = VolumeStructure(filesystem="happyfs", size=2 * SIZE_MIB)
	return PositionedStructure(vs, index=1)


@pytest.fixture(autouse=True)
def no_cleanup_env(monkeypatch):
	monkeypatch.delenv("GADGET_DEBUG_IMAGE_NO_CLEANUP", raising=False)
