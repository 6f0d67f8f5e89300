import sys

class BuildException(Exception):
	"""
	Base of all failures that abort a build step.
	Carries a single message describing the step and the cause.
	"""
	def __init__(self, message = ""):
		super().__init__(message)
		self.__message = message

	def getMessage(self) -> str:
		return self.__message

	def report(self):
		print(self.__message, file = sys.stderr)

class ConfigurationError(BuildException):
	"""
	A required tool or setting is missing. Raised before anything on disk is touched.
	"""
	pass

class ValidationError(BuildException):
	"""
	Malformed arguments, such as a rewrite rule with an empty pattern.
	"""
	pass

class ProcessFailure(BuildException):
	"""
	An external tool could not be started or exited with a non-zero code.
	"""
	def __init__(self, message = "", returnCode : int = None):
		super().__init__(message)
		self.returnCode = returnCode

class IOFailure(BuildException):
	pass
