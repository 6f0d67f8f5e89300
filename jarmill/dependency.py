from typing import Dict, Iterable, List, Tuple
from jarmill.path import Path
from jarmill.workspace import Module
from jarmill.exceptions import ConfigurationError

class TypeResolveConfiguration():
	"""
	How one dependency group is resolved.

	transitive: whether dependencies of the group's artifacts are included.
	transitiveGroups: the dependency groups followed when resolving transitively.
	fetchSource: whether the companion source archives are requested too.
	"""
	def __init__(self, fetchSource : bool = False, transitive : bool = False, transitiveGroups : Iterable[str] = ("compile","runtime")):
		self.fetchSource = fetchSource
		self.transitive = transitive
		self.transitiveGroups : Tuple[str] = tuple(transitiveGroups)

	def __eq__(self, other):
		return isinstance(other, TypeResolveConfiguration) \
			and self.fetchSource == other.fetchSource \
			and self.transitive == other.transitive \
			and self.transitiveGroups == other.transitiveGroups

	def __repr__(self):
		return f"TypeResolveConfiguration(fetchSource={self.fetchSource}, transitive={self.transitive}, transitiveGroups={self.transitiveGroups})"

class ResolveConfiguration():
	"""
	An ordered set of dependency groups to resolve, each with its own options.
	"""
	def __init__(self):
		self.groups : Dict[str,TypeResolveConfiguration] = {}

	def withGroup(self, name : str, configuration : TypeResolveConfiguration) -> 'ResolveConfiguration':
		self.groups[name] = configuration
		return self

	def items(self):
		return self.groups.items()

	def __len__(self):
		return len(self.groups)

class DependencyGroup():
	"""
	A single group request: the unit the resolver works on.
	"""
	def __init__(self, name : str, configuration : TypeResolveConfiguration):
		self.name = name
		self.transitive = configuration.transitive
		self.fetchSource = configuration.fetchSource
		self.transitiveGroups = configuration.transitiveGroups

	def __repr__(self):
		return f"DependencyGroup({self.name!r}, transitive={self.transitive})"

class DependencyResolver(Module):
	"""
	Turns a dependency group into the list of artifact files it stands for.

	How artifacts are fetched and cached is up to the implementation. Replace
	this module with workspace.use() to plug in an actual repository.
	"""
	def resolve(self, group : DependencyGroup) -> List[Path]:
		raise ConfigurationError(f"No dependency resolver is configured to resolve the dependency group [{group.name}]. Register one with workspace.use().")

	def resolveAll(self, configuration : ResolveConfiguration) -> List[Path]:
		"""
		Resolve every group of the configuration, in declaration order.
		"""
		paths : List[Path] = []
		for (name, typeConfiguration) in configuration.items():
			for p in self.resolve(DependencyGroup(name, typeConfiguration)):
				if p not in paths:
					paths.append(p)
		return paths

class Artifact():
	"""
	A locally available artifact, with its own dependencies by group.
	"""
	def __init__(self, file : Path, sourceFile : Path = None, dependencies : Dict[str,Iterable['Artifact']] = ()):
		self.file = Path(file)
		self.sourceFile = None if sourceFile is None else Path(sourceFile)
		self.dependencies : Dict[str,List[Artifact]] = {k:list(v) for (k,v) in dict(dependencies).items()}

	def __repr__(self):
		return f"Artifact({str(self.file)!r})"

class StaticDependencyResolver(DependencyResolver):
	"""
	Resolves dependency groups declared up front with declare().
	"""
	key = DependencyResolver.key

	def __init__(self, context) -> None:
		super().__init__(context)
		self.__groups : Dict[str,List[Artifact]] = {}

	def declare(self, groupName : str, *artifacts : Artifact):
		self.__groups.setdefault(groupName, []).extend(artifacts)

	def resolve(self, group : DependencyGroup) -> List[Path]:
		paths : List[Path] = []
		visited = set()

		def visit(artifact : Artifact):
			if artifact.file in visited:
				return
			visited.add(artifact.file)
			paths.append(artifact.file)
			if group.transitive:
				for g in group.transitiveGroups:
					for d in artifact.dependencies.get(g,()):
						visit(d)

		for a in self.__groups.get(group.name,()):
			visit(a)
		return paths
