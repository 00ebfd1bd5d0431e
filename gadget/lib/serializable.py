from typing import Self


class Serializable:
	def serialize(self) -> None | bool | int | float | str | tuple | list | dict: pass

	def to_json(self, *, indent=None, sort_keys=False, **kw) -> str:
		from gadget.lib.json import dumps
		return dumps(self.serialize(), indent=indent, sort_keys=sort_keys, **kw)

	@property
	def class_path(self) -> str:
		ret = self.__class__.__module__ or ""
		if len(ret) > 0: ret += "."
		ret += self.__class__.__qualname__
		return ret

	def __str__(self) -> str:
		j = self.to_json(indent=2).strip()
		return f"{self.class_path}({j})"

	def __repr__(self) -> str:
		j = self.to_json().strip()
		return f"{self.class_path}({j})"


class SerializableDict(Serializable):
	"""
	Object rendered as a dict of its public data attributes
	"""
	def to_dict(self) -> dict:
		ret = {}
		for key in dir(self):
			if key.startswith("_"): continue
			if key == "class_path": continue
			val = getattr(self, key)
			if callable(val): continue
			ret[key] = val
		return ret

	def from_dict(self, o: dict) -> Self:
		for key in o:
			if key.startswith("_"): continue
			setattr(self, key, o[key])
		return self

	def serialize(self) -> dict:
		return self.to_dict()

	def __init__(self, o: dict = None):
		if o: self.from_dict(o)
