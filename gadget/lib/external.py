from subprocess import Popen
from logging import getLogger
log = getLogger(__name__)


def run_external(cmd: list[str]) -> int:
	"""
	Run external command, returns its exit code
	run_external(["mkfs.ext4", "-L", "boot", "part.img"])
	"""
	argv = " ".join(cmd)
	log.debug(f"running external command {argv}")
	proc = Popen(cmd)
	ret = proc.wait()
	log.debug(f"command exit with {ret}")
	return ret
