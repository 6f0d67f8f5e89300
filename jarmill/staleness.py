from typing import Callable, List
from jarmill.path import Path, FileRecord, scanFiles

def findStale(sourceRoot : Path,
		outputRoot : Path,
		sourceFilter : Callable[[Path],bool],
		nameMapper : Callable[[str],str]) -> List[FileRecord]:
	"""
	The source files whose output counterpart is missing, or older than the source.

	Counterparts are found by name alone: the relative path of the source mapped
	through nameMapper, under outputRoot. A file is not stale just because a file
	it refers to has changed. The compiler is always handed the full source path,
	so such references are still resolved against the current sources.

	Results are ordered by relative path. A missing source root has no stale files.
	"""
	sourceRoot = Path(sourceRoot)
	outputRoot = Path(outputRoot)
	stale = []
	for record in scanFiles(sourceRoot, sourceFilter):
		output = outputRoot.resolve(nameMapper(record.relativePath))
		if not output.isFile() or output.getModifiedTime() < record.lastModifiedTime:
			stale.append(record)
	return stale
