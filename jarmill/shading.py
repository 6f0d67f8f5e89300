"""
Shading: moving third-party classes into the project's own namespace.

A pipeline run goes through a fixed sequence of stages, each working on a
private temporary directory produced by the previous one:

  collected   the resolved archives of the dependency group are copied together
  exploded    all archives are extracted into one tree (last writer wins)
  filtered    manifest and signature files are removed from the tree
  repackaged  the tree is packed into a single intermediate archive
  rewritten   JarJar applies the rename rules to the intermediate archive
  installed   the rewritten archive is extracted into the output directory

Every temporary directory and the rules file are removed when the run ends,
whether it succeeded or not. A failed run is not resumable.
"""
import os
import re
import shutil
import tempfile
import zipfile
from contextlib import ExitStack, contextmanager, suppress
from typing import Dict, Iterable, List
from jarmill.path import Path
from jarmill.dependency import DependencyGroup, DependencyResolver, TypeResolveConfiguration
from jarmill.operation.process import ToolRunner
from jarmill.operation.zip import createArchive, explodeArchive
from jarmill.progress import Progress
from jarmill.exceptions import BuildException, IOFailure, ProcessFailure, ValidationError

STAGE_IDLE = "idle"
STAGE_COLLECTED = "collected"
STAGE_EXPLODED = "exploded"
STAGE_FILTERED = "filtered"
STAGE_REPACKAGED = "repackaged"
STAGE_REWRITTEN = "rewritten"
STAGE_INSTALLED = "installed"
STAGE_CLEANED = "cleaned"

METADATA_DIRECTORY = "META-INF"

SIGNING_METADATA = re.compile(r"MANIFEST\.MF|.+\.(?:SF|DSA|RSA|EC)|SIG-.+", re.IGNORECASE)

WHITESPACE = re.compile(r"\s")

def checkPattern(side : str, pattern : str, fromPattern, toPattern) -> str:
	"""
	A pattern is one non-empty word. The rules file holds one rule per line,
	split on whitespace.
	"""
	if not isinstance(pattern, str) or pattern.strip() == "":
		raise ValidationError(f"A JarJar rule must have a non-empty [{side}] pattern. Got [{fromPattern}] to [{toPattern}].")
	pattern = pattern.strip()
	if WHITESPACE.search(pattern):
		raise ValidationError(f"The [{side}] pattern of a JarJar rule must not contain whitespace. Got [{fromPattern}] to [{toPattern}].")
	return pattern

class Rule():
	"""
	A JarJar rename rule, such as 'com.vendor.**' to 'com.myproject.shaded.@1'.
	"""
	def __init__(self, fromPattern : str, toPattern : str):
		self.fromPattern = checkPattern("from", fromPattern, fromPattern, toPattern)
		self.toPattern = checkPattern("to", toPattern, fromPattern, toPattern)

	def format(self) -> str:
		return f"rule {self.fromPattern} {self.toPattern}"

	def __eq__(self, other):
		return isinstance(other, Rule) and self.fromPattern == other.fromPattern and self.toPattern == other.toPattern

	def __repr__(self):
		return f"Rule({self.fromPattern!r}, {self.toPattern!r})"

class JarJarRules():
	"""
	The rules of one shading run, in declaration order.
	Declaring a rule for a pattern again replaces its target.
	"""
	def __init__(self, rules : Iterable[Rule] = ()):
		self.__rules : Dict[str,Rule] = {}
		for r in rules:
			self.add(r)

	def rule(self, fromPattern : str, toPattern : str) -> 'JarJarRules':
		return self.add(Rule(fromPattern, toPattern))

	def add(self, rule : Rule) -> 'JarJarRules':
		if not isinstance(rule, Rule):
			raise ValidationError(f"JarJar rules must be declared as Rule objects. Got [{rule!r}].")
		self.__rules[rule.fromPattern] = rule
		return self

	def getRules(self) -> List[Rule]:
		return list(self.__rules.values())

	def __len__(self):
		return len(self.__rules)

	def format(self) -> str:
		return "".join(r.format() + "\n" for r in self.__rules.values())

	def writeRulesFile(self, directory = None) -> Path:
		"""
		Writes the rules to a new temporary file and returns it. The caller owns the file.
		"""
		(handle, name) = tempfile.mkstemp(prefix = "jarjar", suffix = "rules", dir = directory)
		try:
			with os.fdopen(handle, "w", encoding = "utf-8") as output:
				output.write(self.format())
		except BaseException:
			removeFile(name)
			raise
		return Path(name)

def filterSigningMetadata(directory : Path) -> List[str]:
	"""
	Deletes the manifest and the signature files from the metadata directory of
	the tree. Returns the names of the deleted files.
	"""
	metadata = Path(directory).subpath(METADATA_DIRECTORY)
	if not metadata.isDirectory():
		return []
	deleted = []
	for f in metadata.getChildren(deterministic = True):
		if f.isFile() and SIGNING_METADATA.fullmatch(f.getName()):
			f.opDeleteFile()
			deleted.append(f"{METADATA_DIRECTORY}/{f.getName()}")
	return deleted

def removeDirectory(directory : Path):
	shutil.rmtree(directory, ignore_errors = True)

def removeFile(file : Path):
	with suppress(OSError):
		os.remove(file)

class ShadingPipeline():
	"""
	One shading run. Create a new pipeline for every run.
	"""
	def __init__(self,
			resolver : DependencyResolver,
			toolRunner : ToolRunner,
			progress : Progress,
			javaPath : Path,
			jarjarPath : Path,
			transitiveGroups : Iterable[str] = ("compile","runtime"),
			temporaryDirectory : Path = None):
		self.resolver = resolver
		self.toolRunner = toolRunner
		self.progress = progress
		self.javaPath = javaPath
		self.jarjarPath = jarjarPath
		self.transitiveGroups = tuple(transitiveGroups)
		self.temporaryDirectory = temporaryDirectory
		self.stage = STAGE_IDLE
		self.__group = None

	def shade(self, dependencyGroup : str, rules : JarJarRules, outputDirectory : Path) -> List[str]:
		"""
		Runs every stage in order and returns the entry names installed into the output directory.
		"""
		if not isinstance(dependencyGroup, str) or dependencyGroup == "":
			raise ValidationError("You must specify the name of the dependency group to shade.")
		if outputDirectory is None:
			raise ValidationError("You must specify the output directory for the shaded classes.")
		if not isinstance(rules, JarJarRules):
			rules = JarJarRules(rules)
		assert self.stage == STAGE_IDLE, "A ShadingPipeline can only run once."
		self.__group = dependencyGroup
		outputDirectory = Path(outputDirectory)

		with self.progress.register(f"JarJar {dependencyGroup} into {outputDirectory}") as pu:
			pu.setRunning()
			try:
				with ExitStack() as resources:
					collected = self.__collect(resources)
					exploded = self.__explode(resources, collected)
					self.__filter(exploded)
					intermediate = self.__repackage(resources, exploded)
					rewritten = self.__rewrite(resources, rules, intermediate)
					installed = self.__install(rewritten, outputDirectory)
					self.__refilter(outputDirectory)
				return installed
			finally:
				self.stage = STAGE_CLEANED

	@contextmanager
	def __stage(self, name : str):
		try:
			yield
		except BuildException:
			raise
		except (OSError, zipfile.BadZipFile) as x:
			raise IOFailure(f"JarJar failed for dependency group [{self.__group}] while {name}: {x}") from x

	def __allocate(self, resources : ExitStack, purpose : str) -> Path:
		directory = Path(tempfile.mkdtemp(prefix = f"jarmill-{purpose}-", dir = self.temporaryDirectory))
		resources.callback(removeDirectory, directory)
		return directory

	def __collect(self, resources : ExitStack) -> Path:
		with self.__stage("collecting dependencies"):
			group = DependencyGroup(self.__group, TypeResolveConfiguration(
				fetchSource = False,
				transitive = True,
				transitiveGroups = self.transitiveGroups))
			artifacts = self.resolver.resolve(group)
			directory = self.__allocate(resources, "collect")
			self.progress.debug(f"Collecting [{len(artifacts)}] artifacts of [{self.__group}] into [{directory}]")
			for a in artifacts:
				a = Path(a)
				target = directory.subpath(a.getName())
				counter = 1
				while target.isPresent():
					target = directory.subpath(f"{counter}-{a.getName()}")
					counter += 1
				a.opCopyTo(target)
		self.stage = STAGE_COLLECTED
		return directory

	def __explode(self, resources : ExitStack, collected : Path) -> Path:
		with self.__stage("exploding archives"):
			directory = self.__allocate(resources, "explode")
			for a in collected.getChildren(deterministic = True):
				if a.isFile() and a.hasExtension("jar"):
					self.progress.debug(f"Exploding [{a.getName()}]")
					explodeArchive(a, directory)
		self.stage = STAGE_EXPLODED
		return directory

	def __filter(self, exploded : Path):
		with self.__stage("removing signatures"):
			for name in filterSigningMetadata(exploded):
				self.progress.debug(f"Removed [{name}]")
		self.stage = STAGE_FILTERED

	def __repackage(self, resources : ExitStack, exploded : Path) -> Path:
		with self.__stage("repackaging classes"):
			directory = self.__allocate(resources, "jarjar")
			intermediate = directory.subpath("input.jar")
			createArchive(intermediate, [exploded], manifest = False)
		self.stage = STAGE_REPACKAGED
		return intermediate

	def __rewrite(self, resources : ExitStack, rules : JarJarRules, intermediate : Path) -> Path:
		with self.__stage("rewriting classes"):
			rulesFile = rules.writeRulesFile(self.temporaryDirectory)
			resources.callback(removeFile, rulesFile)
			rewritten = intermediate.getAncestor().subpath("output.jar")
			self.toolRunner.runTool(
				[self.javaPath, "-jar", self.jarjarPath, "process", rulesFile, intermediate, rewritten],
				f"JarJar failed for dependency group [{self.__group}]")
			if not rewritten.isFile():
				raise ProcessFailure(f"JarJar failed for dependency group [{self.__group}]. It did not produce [{rewritten}].")
		self.stage = STAGE_REWRITTEN
		return rewritten

	def __install(self, rewritten : Path, outputDirectory : Path) -> List[str]:
		with self.__stage("installing classes"):
			names = explodeArchive(rewritten, outputDirectory)
		self.progress.info(f"Shaded [{len(names)}] entries of [{self.__group}] into [{outputDirectory}]")
		self.stage = STAGE_INSTALLED
		return names

	def __refilter(self, outputDirectory : Path):
		try:
			filterSigningMetadata(outputDirectory)
		except OSError as x:
			self.progress.debug(f"Unable to remove signatures from [{outputDirectory}]: {x}")
