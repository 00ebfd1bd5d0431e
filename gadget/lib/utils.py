import os
from logging import getLogger
log = getLogger(__name__)


def size_to_bytes(value: str | int, alt_units: dict = None) -> int:
	"""
	Convert human-readable size string to number
	size_to_bytes("1MiB") = 1048576
	size_to_bytes("4K") = 4096
	size_to_bytes("2M") = 2097152
	size_to_bytes(123) = 123
	size_to_bytes("2048s", {'s': 512}) = 1048576
	"""
	units = {
		'B': 1, 'Byte': 1, 'Bytes': 1, 'bytes': 1, 'byte': 1,
		'k': 10**3, 'kB': 10**3, 'kb': 10**3, 'K': 2**10, 'KB': 2**10, 'KiB': 2**10,
		'm': 10**6, 'mB': 10**6, 'mb': 10**6, 'M': 2**20, 'MB': 2**20, 'MiB': 2**20,
		'g': 10**9, 'gB': 10**9, 'gb': 10**9, 'G': 2**30, 'GB': 2**30, 'GiB': 2**30,
		't': 10**12, 'tB': 10**12, 'tb': 10**12, 'T': 2**40, 'TB': 2**40, 'TiB': 2**40,
	}
	if type(value) is int:
		# return number directly
		return value
	elif type(value) is str:
		# add custom units
		if alt_units: units.update(alt_units)

		# find all matched units
		matches = {unit: len(unit) for unit in units if value.endswith(unit)}

		# find out the longest matched unit
		max_unit = max(matches.values(), default=0)

		# use the longest unit
		unit = next((unit for unit in matches.keys() if matches[unit] == max_unit), None)

		# get mul for target unit
		mul = units[unit] if unit else 1

		# convert string to target number
		return int(float(value[:len(value)-max_unit].strip()) * mul)
	else: raise TypeError("bad size value")


def env_bool(name: str, default: bool = False) -> bool:
	"""
	Read a boolean flag from process environment
	GADGET_X=1     env_bool("GADGET_X") = True
	GADGET_X=off   env_bool("GADGET_X") = False
	(unset)        env_bool("GADGET_X") = False
	"""
	value = os.environ.get(name)
	if value is None: return default
	value = value.strip().lower()
	if len(value) == 0: return default
	if value in ("1", "t", "true", "y", "yes", "on"): return True
	if value in ("0", "f", "false", "n", "no", "off"): return False
	log.warning(f"ignoring invalid boolean {value!r} in {name}")
	return default
