from jarmill.path import Path, identityMapper
from jarmill.staleness import findStale
from jarmill.progress import Progress
from jarmill.workspace import Module
from jarmill.exceptions import IOFailure

class FileManagement(Module):
	def __init__(self, context) -> None:
		super().__init__(context)
		self.ws.add(Progress)

	def copyTree(self, sourceDirectory : Path, targetDirectory : Path) -> int:
		"""
		Copies every file under the source directory to the same relative location
		under the target directory. Files whose copy is at least as new as the
		source are left alone. Returns the number of files copied.
		"""
		sourceDirectory = Path(sourceDirectory)
		targetDirectory = Path(targetDirectory)
		progress = self.ws[Progress]
		with progress.register(f"Copy {sourceDirectory} to {targetDirectory}") as pu:
			stale = findStale(sourceDirectory, targetDirectory, lambda _: True, identityMapper)
			if len(stale) == 0:
				pu.setUpToDate()
				return 0
			pu.setRunning()
			progress.info(f"Copying [{len(stale)}] files from [{sourceDirectory}] to [{targetDirectory}]")
			try:
				for record in stale:
					target = targetDirectory.resolve(record.relativePath)
					target.getAncestor().opCreateDirectories()
					record.absolutePath.opCopyTo(target)
			except OSError as x:
				raise IOFailure(f"Unable to copy [{sourceDirectory}] to [{targetDirectory}]: {x}") from x
			return len(stale)
