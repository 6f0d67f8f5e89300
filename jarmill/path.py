import pathlib
import shutil
import os
from typing import Hashable, Final, List, Callable, TextIO, BinaryIO

class Path(Hashable):
	"""
	Represents an absolute file Path.
	This always uses forward slash '/' for separators.
	"""
	__p: Final[pathlib.Path]
	def __new__(cls,path):
		if cls is Path and type(path) is Path:
			return path
		self = super().__new__(cls)
		if isinstance(path,Path):
			self.__p = path.__p
		else:
			self.__p = pathlib.Path(path).absolute().resolve()
		self.__s = None
		return self

	def __hash__(self):
		return self.__p.__hash__()

	def __eq__(self,other):
		return isinstance(other,Path) and self.__p == other.__p

	def __lt__(self,other):
		return str(self) < str(other)

	def __gt__(self,other):
		return str(self) > str(other)

	def __str__(self):
		s = self.__s
		if s is None:
			s = self.__p.as_posix()
			while len(s) > 1 and s.endswith("/"):
				s = s[:-1]
			self.__s = s
		return s

	def __fspath__(self):
		return str(self.__p)

	def __repr__(self):
		return f"Path(\'{str(self)}\')"

	def hasExtension(self,*ext):
		e = self.getExtension()
		return any(x == e for x in ext)

	def getExtension(self):
		n = self.__p.name
		k = n.rfind(".")
		if 0 <= k:
			return n[k+1:]
		else:
			return None

	def resolve(self,subpath) -> 'Path':
		"""
		Resolve a path against this one. Absolute arguments are returned as they are.
		"""
		return Path(self.__p.joinpath(subpath))

	def relativeTo(self,other: 'Path') -> 'RelativePath':
		return RelativePath(self,self.__p.relative_to(other.__p))

	def getAncestor(self,steps : int = 1) -> 'Path':
		"""
		Ancestor path the given number of layers up, if it exists. None if it does not.
		"""
		at = self.__p
		for _ in range(steps):
			pt = at.parent
			if pt == at:
				return None
			at = pt
		return Path(at)

	def getName(self) -> str:
		"""
		The last path element. The file name including extensions.
		"""
		return self.__p.name

	def subpath(self,child : str) -> 'RelativePath':
		return RelativePath(self.__p.joinpath(child),child)

	def opCreateDirectories(self):
		self.__p.mkdir(parents = True, exist_ok = True)

	def opDeleteFile(self):
		self.__p.unlink()

	def opDelete(self):
		"""
		Delete the file, or the directory with everything in it.
		"""
		if self.isDirectory():
			shutil.rmtree(self.__p)
		elif self.isFile():
			self.opDeleteFile()

	def opCopyTo(self,other : 'Path'):
		"""
		Copy the file, keeping the modification time.
		"""
		shutil.copy2(src=str(self),dst=str(other))

	def isDirectory(self):
		return self.__p.is_dir()

	def isFile(self):
		return self.__p.is_file()

	def isPresent(self):
		return self.__p.exists()

	def isExecutable(self):
		return self.isFile() and os.access(self.__p, os.X_OK)

	def getChildren(self,deterministic = False):
		"""
		A generator producing the direct children of this Path.
		"""
		if deterministic:
			return iter(sorted(Path(p) for p in self.__p.iterdir()))
		else:
			return (Path(p) for p in self.__p.iterdir())

	def getLeaves(self,deterministic = False):
		"""
		A generator producing all non-directory subpaths of this path.
		"""
		for f in self.getChildren(deterministic = deterministic):
			if f.isFile():
				yield f
			if f.isDirectory():
				yield from f.getLeaves(deterministic = deterministic)

	def getPreorder(self,includeSelf = True,deterministic = False):
		"""
		A generator producing all subpaths of this path in preorder.
		All paths are encountered before any of their subpaths.
		"""
		if includeSelf:
			yield self
		if self.isDirectory():
			for f in self.getChildren(deterministic = deterministic):
				yield from f.getPreorder(includeSelf = True,deterministic = deterministic)

	def getModifiedTime(self):
		return os.path.getmtime(self.__p)

	def open(self,flags,encoding : str = None) -> TextIO | BinaryIO:
		f = ""
		for k in flags:
			match k:
				case "r" | "w" | "a" | "x":
					f += k
				case default:
					raise ValueError("Unknown flag: "+k)
		if encoding is None:
			f += "b"
		return open(self.__p, f, encoding = encoding)

class RelativePath(Path):
	"""
	Still represents an absolute file path, but has a relative part for reference.
	"""
	def __new__(cls, path, subpath):
		self = super().__new__(cls, path)
		self._subpath = pathlib.PurePosixPath(subpath)
		return self

	def relativeStr(self):
		return self._subpath.as_posix()

	def __repr__(self):
		return f"RelativePath({repr(str(self))},{repr(self.relativeStr())})"

class FileRecord():
	"""
	A file found by a scan. The relative path is relative to the scanned root.
	"""
	__slots__ = ("relativePath","absolutePath","lastModifiedTime")

	def __init__(self, relativePath : str, absolutePath : Path, lastModifiedTime : float):
		object.__setattr__(self, "relativePath", relativePath)
		object.__setattr__(self, "absolutePath", absolutePath)
		object.__setattr__(self, "lastModifiedTime", lastModifiedTime)

	def __setattr__(self, name, value):
		raise AttributeError("FileRecord is immutable")

	def __repr__(self):
		return f"FileRecord({self.relativePath!r})"

def scanFiles(root : Path, fileFilter : Callable[[Path],bool] = None) -> List[FileRecord]:
	"""
	Walk the root recursively and list every file in it, ordered by relative path.
	A root that is not a directory has no files.
	"""
	root = Path(root)
	if not root.isDirectory():
		return []
	records = []
	for f in root.getLeaves(deterministic = True):
		if fileFilter is not None and not fileFilter(f):
			continue
		records.append(FileRecord(f.relativeTo(root).relativeStr(), f, f.getModifiedTime()))
	return records

def extensionFilter(*extensions : str) -> Callable[[Path],bool]:
	"""
	Filter accepting files with any of the extensions. Extensions are given without the dot.
	"""
	return lambda p: p.hasExtension(*extensions)

def extensionMapper(fromExtension : str, toExtension : str) -> Callable[[str],str]:
	"""
	Maps a relative file name with one extension to the same name with another.
	Names without the source extension are returned as they are.
	"""
	suffix = "." + fromExtension
	def mapper(relativePath : str) -> str:
		if relativePath.endswith(suffix):
			return relativePath[:-len(suffix)] + "." + toExtension
		return relativePath
	return mapper

def identityMapper(relativePath : str) -> str:
	return relativePath
