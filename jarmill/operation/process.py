import subprocess
from subprocess import list2cmdline
from typing import Iterable, Tuple
from jarmill.path import Path
from jarmill.progress import Progress, ProgressUnit
from jarmill.workspace import Module
from jarmill.exceptions import ProcessFailure

class ToolRunner(Module):
	"""
	Runs external tools. Everything that starts a child process goes through here.

	Standard output and error are drained together while waiting for the exit,
	so a chatty tool cannot block on a full pipe.
	"""
	def __init__(self, context) -> None:
		super().__init__(context)
		self.ws.add(Progress)

	def runCommand(self, command : Iterable, workingDirectory : Path = None, input : bytes = None) -> Tuple[int, bytes, bytes]:
		"""
		Runs the specified command and blocks until it exits.

		Returns the exit code, the output, and error output of the command.
		"""
		command = [str(c) for c in command]
		try:
			proc = subprocess.Popen(
				command,
				cwd = None if workingDirectory is None else str(workingDirectory),
				stdin = subprocess.PIPE if input is not None else subprocess.DEVNULL,
				stdout = subprocess.PIPE,
				stderr = subprocess.PIPE)
		except OSError as x:
			raise ProcessFailure(f"Unable to start [{list2cmdline(command)}]: {x}") from x
		stdout, stderr = proc.communicate(input = input)
		return (proc.returncode, stdout, stderr)

	def runTool(self, command : Iterable, failureMessage : str, workingDirectory : Path = None, progressUnit : ProgressUnit = None):
		"""
		Runs the command, echoes whatever it printed, and raises ProcessFailure
		with the failure message if it exits with a non-zero code.
		"""
		command = [str(c) for c in command]
		progress = self.ws[Progress]
		if progressUnit is not None:
			progressUnit.setName(list2cmdline(command))
			progressUnit.setRunning()
		progress.debug(f"Running [{list2cmdline(command)}]")
		(rc, out, err) = self.runCommand(command, workingDirectory = workingDirectory)
		if out:
			progress.info(out.decode(errors = "replace").rstrip())
		if err:
			progress.error(err.decode(errors = "replace").rstrip())
		if rc != 0:
			progress.debug(f"Process exited with code {rc}.")
			raise ProcessFailure(failureMessage, returnCode = rc)
		return rc
