class GadgetInternalError(Exception):
	"""
	Caller or integration mistake, never an environmental fault
	str(GadgetInternalError("structure has no filesystem"))
	= "internal error: structure has no filesystem"
	"""
	def __init__(self, message: str):
		super().__init__(f"internal error: {message}")


class GadgetWriteError(Exception):
	"""
	Runtime fault while producing a filesystem image
	"""
	pass
