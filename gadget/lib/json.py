import json
from gadget.lib import serializable


class SerializableEncoder(json.JSONEncoder):
	"""
	JSON implement of serializable interface
	"""
	def default(self, o):
		if isinstance(o, serializable.SerializableDict):
			return o.to_dict()
		if isinstance(o, serializable.Serializable):
			return o.serialize()
		return super().default(o)


def dumps(obj, *, cls=None, indent=None, sort_keys=False, **kw) -> str:
	if cls is None: cls = SerializableEncoder
	return json.dumps(obj, cls=cls, indent=indent, sort_keys=sort_keys, **kw)

