import os
from typing import Iterable, List
from jarmill.path import Path
from jarmill.dependency import DependencyResolver, ResolveConfiguration
from jarmill.progress import Progress
from jarmill.workspace import Module

class Classpath():
	"""
	An ordered list of class locations. The first location holding a class wins,
	so order is kept exactly as added. Adding a path that is already present does nothing.
	"""
	def __init__(self, paths : Iterable = ()):
		self.__paths : List[Path] = []
		self.addAll(paths)

	def add(self, path):
		path = Path(path)
		if path not in self.__paths:
			self.__paths.append(path)
		return self

	def addAll(self, paths : Iterable):
		for p in paths:
			self.add(p)
		return self

	def getPaths(self) -> List[Path]:
		return list(self.__paths)

	def __iter__(self):
		return iter(self.__paths)

	def __len__(self):
		return len(self.__paths)

	def join(self, separator : str = os.pathsep) -> str:
		return separator.join(os.fspath(p) for p in self.__paths)

	def toString(self, prefix : str = "") -> str:
		"""
		The classpath as a single string, for instance "-classpath /a:/b".
		An empty classpath is the empty string, without the prefix.
		"""
		if len(self.__paths) == 0:
			return ""
		return prefix + self.join()

	def toArguments(self, flag : str = "-classpath") -> List[str]:
		"""
		The classpath as command arguments. An empty classpath has no arguments.
		"""
		if len(self.__paths) == 0:
			return []
		return [flag, self.join()]

	def __str__(self):
		return self.toString()

	def __repr__(self):
		return f"Classpath({[str(p) for p in self.__paths]!r})"

def libraryJars(directory : Path) -> List[Path]:
	"""
	The jar files directly inside the directory, by name. Missing directories have none.
	"""
	directory = Path(directory)
	if not directory.isDirectory():
		return []
	return [p for p in directory.getChildren(deterministic = True) if p.isFile() and p.hasExtension("jar")]

class ClasspathComposer(Module):
	def __init__(self, context) -> None:
		super().__init__(context)
		self.ws.add(DependencyResolver)
		self.ws.add(Progress)

	def compose(self,
			resolveConfiguration : ResolveConfiguration = None,
			libraryDirectories : Iterable = (),
			additionalPaths : Iterable = ()) -> Classpath:
		"""
		Dependency groups first, in declaration order, then the jars of the library
		directories, then the additional paths.
		"""
		classpath = Classpath()
		if resolveConfiguration is not None and len(resolveConfiguration) != 0:
			classpath.addAll(self.ws[DependencyResolver].resolveAll(resolveConfiguration))
		for d in libraryDirectories:
			jars = libraryJars(d)
			if len(jars) == 0:
				self.ws[Progress].debug(f"No library jars found in [{Path(d)}]")
			classpath.addAll(jars)
		classpath.addAll(additionalPaths)
		return classpath
