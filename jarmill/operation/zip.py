import zipfile
from typing import Dict, Iterable, List
from jarmill.path import Path

MANIFEST_NAME = "META-INF/MANIFEST.MF"
DEFAULT_MANIFEST = "Manifest-Version: 1.0\r\nCreated-By: jarmill\r\n\r\n"

def collectEntries(directories : Iterable[Path]) -> Dict[str,Path]:
	"""
	Entry names of the union of the directories, mapped to their files.
	Directories that do not exist are skipped. When two directories
	hold the same name, the earlier directory wins.
	"""
	entries : Dict[str,Path] = {}
	for d in directories:
		d = Path(d)
		if not d.isDirectory():
			continue
		for f in d.getLeaves(deterministic = True):
			name = f.relativeTo(d).relativeStr()
			if name not in entries:
				entries[name] = f
	return entries

def createArchive(archiveFile : Path, directories : Iterable[Path], manifest : bool = True) -> List[str]:
	"""
	Packs the directories into one archive, replacing any existing file.
	When 'manifest' is set and no directory supplies a manifest, a default one is written first.
	Returns the entry names in archive order.
	"""
	archiveFile = Path(archiveFile)
	entries = collectEntries(directories)
	archiveFile.getAncestor().opCreateDirectories()
	names = []
	with zipfile.ZipFile(archiveFile, "w", compression = zipfile.ZIP_DEFLATED) as output:
		if manifest and MANIFEST_NAME not in entries:
			output.writestr(MANIFEST_NAME, DEFAULT_MANIFEST)
			names.append(MANIFEST_NAME)
		if MANIFEST_NAME in entries:
			output.write(entries.pop(MANIFEST_NAME), MANIFEST_NAME)
			names.append(MANIFEST_NAME)
		for (name, file) in entries.items():
			output.write(file, name)
			names.append(name)
	return names

def explodeArchive(archiveFile : Path, targetDirectory : Path) -> List[str]:
	"""
	Extracts every entry of the archive under the target directory, overwriting
	files already there. Returns the entry names.
	"""
	targetDirectory = Path(targetDirectory)
	targetDirectory.opCreateDirectories()
	with zipfile.ZipFile(Path(archiveFile)) as input:
		input.extractall(targetDirectory)
		return input.namelist()
