import shlex
from typing import Callable, Iterable, List
from jarmill.path import Path, extensionFilter, extensionMapper
from jarmill.workspace import Module
from jarmill.progress import Progress
from jarmill.toolchain import JavaToolchain
from jarmill.dependency import DependencyResolver, ResolveConfiguration, TypeResolveConfiguration
from jarmill.classpath import Classpath, ClasspathComposer
from jarmill.staleness import findStale
from jarmill.shading import JarJarRules, ShadingPipeline
from jarmill.operation.files import FileManagement
from jarmill.operation.process import ToolRunner
from jarmill.operation.zip import createArchive
from jarmill.exceptions import ConfigurationError, IOFailure

OUTCOME_SKIPPED = "skipped"
OUTCOME_SUCCEEDED = "succeeded"

class JavaLayout():
	"""
	The directories used by the Java build, relative to the project directory.
	"""
	def __init__(self):
		self.buildDirectory = "build"
		self.jarOutputDirectory = "build/jars"
		self.docDirectory = "build/doc"
		self.mainSourceDirectory = "src/main/java"
		self.mainResourceDirectory = "src/main/resources"
		self.mainBuildDirectory = "build/classes/main"
		self.testSourceDirectory = "src/test/java"
		self.testResourceDirectory = "src/test/resources"
		self.testBuildDirectory = "build/classes/test"

class JavaSettings():
	"""
	The settings of the Java build. javaVersion must be set before anything is built.
	"""
	def __init__(self):
		self.javaVersion : str = None
		self.compilerArguments : str = ""
		self.docArguments : str = ""
		self.libraryDirectories : List[str] = []
		self.mainDependencyResolveConfiguration = ResolveConfiguration() \
			.withGroup("compile", TypeResolveConfiguration(fetchSource = True, transitive = False)) \
			.withGroup("provided", TypeResolveConfiguration(fetchSource = True, transitive = False))
		self.testDependencyResolveConfiguration = ResolveConfiguration() \
			.withGroup("compile", TypeResolveConfiguration(fetchSource = True, transitive = False)) \
			.withGroup("test-compile", TypeResolveConfiguration(fetchSource = True, transitive = False)) \
			.withGroup("provided", TypeResolveConfiguration(fetchSource = True, transitive = False))
		self.jarjarDependencyResolveGroups = ("compile","runtime")
		self.jarjarPath = None
		self.temporaryDirectory = None

class JavaProject(Module):
	"""
	The Java build of one project. Subclass it and drive the build from run():

		class manifest(JavaProject):
			def __init__(self, context):
				super().__init__(context, __file__)
				self.name = "my-project"
				self.version = "1.0"
				self.settings.javaVersion = "1.8"

			def run(self):
				self.clean()
				self.compileMain()
				self.compileTest()
				self.jar()
	"""
	def __init__(self, context, projectFile = None) -> None:
		super().__init__(context)
		self.ws.add(Progress)
		self.ws.add(JavaToolchain)
		self.ws.add(DependencyResolver)
		self.ws.add(ClasspathComposer)
		self.ws.add(FileManagement)
		self.ws.add(ToolRunner)
		if projectFile is not None:
			self.directory = Path(projectFile).getAncestor()
		else:
			self.directory = Path(".")
		self.group : str = None
		self.name : str = None
		self.version : str = None
		self.layout = JavaLayout()
		self.settings = JavaSettings()

	def resolve(self, path) -> Path:
		return Path(self.directory).resolve(path)

	def __initialize(self) -> Path:
		if not self.settings.javaVersion:
			raise ConfigurationError(
				"You must configure the Java version to use with the settings object. It will look something like this:\n\n"
				"  self.settings.javaVersion = \"1.8\"")
		return self.ws[JavaToolchain].getJavac(self.settings.javaVersion)

	def clean(self):
		"""
		Cleans the build directory by completely deleting it.
		"""
		buildDir = self.resolve(self.layout.buildDirectory)
		self.ws[Progress].info(f"Cleaning [{buildDir}]")
		try:
			buildDir.opDelete()
		except OSError as x:
			raise IOFailure(f"Unable to delete [{buildDir}]: {x}") from x

	def compileMain(self):
		"""
		Compiles the main Java files (src/main/java by default) and copies the main resources.
		"""
		outcome = self.compile(
			self.layout.mainSourceDirectory,
			self.layout.mainBuildDirectory,
			self.settings.mainDependencyResolveConfiguration)
		self.copyResources(self.layout.mainResourceDirectory, self.layout.mainBuildDirectory)
		return outcome

	def compileTest(self):
		"""
		Compiles the test Java files (src/test/java by default) against the main classes,
		and copies the test resources.
		"""
		outcome = self.compile(
			self.layout.testSourceDirectory,
			self.layout.testBuildDirectory,
			self.settings.testDependencyResolveConfiguration,
			self.layout.mainBuildDirectory)
		self.copyResources(self.layout.testResourceDirectory, self.layout.testBuildDirectory)
		return outcome

	def compile(self, sourceDirectory, buildDirectory, resolveConfiguration : ResolveConfiguration, *additionalClasspath) -> str:
		"""
		Compiles the source files of the source directory that are newer than their
		class files in the build directory. Only those files are handed to the compiler,
		with the whole source directory on the source path.

		Returns OUTCOME_SKIPPED if nothing needed compiling, OUTCOME_SUCCEEDED otherwise.
		"""
		javac = self.__initialize()
		progress = self.ws[Progress]
		resolvedSourceDir = self.resolve(sourceDirectory)
		resolvedBuildDir = self.resolve(buildDirectory)

		progress.debug(f"Looking for modified files to compile in [{resolvedSourceDir}] compared with [{resolvedBuildDir}]")

		with progress.register(f"Compile {sourceDirectory}") as pu:
			filesToCompile = findStale(resolvedSourceDir, resolvedBuildDir, extensionFilter("java"), extensionMapper("java","class"))
			if len(filesToCompile) == 0:
				progress.info(f"Skipping compile for source directory [{sourceDirectory}]. No files need compiling")
				pu.setUpToDate()
				return OUTCOME_SKIPPED

			progress.info(f"Compiling [{len(filesToCompile)}] Java classes from [{sourceDirectory}] to [{buildDirectory}]")

			classpath = self.classpath(resolveConfiguration, *additionalClasspath)
			command = [javac]
			command.extend(shlex.split(self.settings.compilerArguments))
			command.extend(classpath.toArguments("-classpath"))
			command.extend(["-sourcepath", resolvedSourceDir, "-d", resolvedBuildDir])
			command.extend(r.absolutePath for r in filesToCompile)

			try:
				resolvedBuildDir.opCreateDirectories()
			except OSError as x:
				raise IOFailure(f"Unable to create [{resolvedBuildDir}]: {x}") from x
			self.ws[ToolRunner].runTool(command, "Compilation failed", workingDirectory = self.directory, progressUnit = pu)
			return OUTCOME_SUCCEEDED

	def copyResources(self, sourceDirectory, buildDirectory):
		"""
		Copies the resource files from the source directory to the build directory,
		recursively. A missing source directory has nothing to copy.
		"""
		return self.ws[FileManagement].copyTree(self.resolve(sourceDirectory), self.resolve(buildDirectory))

	def classpath(self, resolveConfiguration : ResolveConfiguration, *additionalPaths) -> Classpath:
		return self.ws[ClasspathComposer].compose(
			resolveConfiguration,
			[self.resolve(d) for d in self.settings.libraryDirectories],
			[self.resolve(p) for p in additionalPaths])

	def document(self) -> str:
		"""
		Runs javadoc over every package of the main source directory.
		"""
		self.__initialize()
		javadoc = self.ws[JavaToolchain].getJavadoc(self.settings.javaVersion)
		progress = self.ws[Progress]
		sourceDir = self.resolve(self.layout.mainSourceDirectory)
		docDir = self.resolve(self.layout.docDirectory)

		with progress.register(f"Javadoc {self.layout.mainSourceDirectory}") as pu:
			packages = packageNames(sourceDir)
			if len(packages) == 0:
				progress.info(f"Skipping documentation for source directory [{self.layout.mainSourceDirectory}]. No packages found")
				pu.setUpToDate()
				return OUTCOME_SKIPPED

			progress.info(f"Generating JavaDoc to [{self.layout.docDirectory}]")

			command = [javadoc]
			command.extend(self.classpath(self.settings.mainDependencyResolveConfiguration).toArguments("-classpath"))
			command.extend(shlex.split(self.settings.docArguments))
			command.extend(["-sourcepath", sourceDir, "-d", docDir])
			command.extend(packages)

			self.ws[ToolRunner].runTool(command, "Javadoc failed", workingDirectory = self.directory, progressUnit = pu)
			return OUTCOME_SUCCEEDED

	def getArtifactName(self, test : bool = False, source : bool = False) -> str:
		if not self.name or not self.version:
			raise ConfigurationError("You must set the name and version of the project to create JAR files.")
		name = self.name
		if test:
			name += "-test"
		name += f"-{self.version}"
		if source:
			name += "-src"
		return name + ".jar"

	def jar(self):
		"""
		Creates the main, main source, test and test source JAR files.
		"""
		self.createJar(self.getArtifactName(), self.layout.mainBuildDirectory)
		self.createJar(self.getArtifactName(source = True), self.layout.mainSourceDirectory, self.layout.mainResourceDirectory)
		self.createJar(self.getArtifactName(test = True), self.layout.testBuildDirectory)
		self.createJar(self.getArtifactName(test = True, source = True), self.layout.testSourceDirectory, self.layout.testResourceDirectory)

	def createJar(self, jarFile : str, *directories) -> Path:
		jarFilePath = self.resolve(self.layout.jarOutputDirectory).resolve(jarFile)
		progress = self.ws[Progress]
		progress.info(f"Creating JAR [{jarFile}]")
		with progress.register(f"JAR {jarFile}") as pu:
			pu.setRunning()
			resolved = []
			for d in directories:
				progress.debug(f"Inspecting directory [{d}] for JAR file")
				resolved.append(self.resolve(d))
			try:
				createArchive(jarFilePath, resolved)
			except OSError as x:
				raise IOFailure(f"Unable to create JAR [{jarFilePath}]: {x}") from x
		return jarFilePath

	def jarjar(self, dependencyGroup : str, outputDirectory, rules : JarJarRules | Iterable | Callable[[JarJarRules],None]):
		"""
		Shades the classes of the dependency group into the output directory,
		renamed by the rules. The rules can be given as a JarJarRules, as
		Rule objects, or as a function declaring them:

			self.jarjar("shaded-libs", self.layout.mainBuildDirectory,
				lambda r: r.rule("com.vendor.**", "com.myproject.shaded.@1"))
		"""
		if callable(rules):
			declared = JarJarRules()
			rules(declared)
			rules = declared
		elif not isinstance(rules, JarJarRules):
			rules = JarJarRules(rules)

		self.__initialize()
		toolchain = self.ws[JavaToolchain]
		java = toolchain.getJava(self.settings.javaVersion)
		jarjarPath = self.settings.jarjarPath
		if jarjarPath is not None:
			jarjarPath = self.resolve(jarjarPath)
		jarjar = toolchain.getJarJar(jarjarPath)

		temporaryDirectory = self.settings.temporaryDirectory
		if temporaryDirectory is not None:
			temporaryDirectory = self.resolve(temporaryDirectory)

		pipeline = ShadingPipeline(
			self.ws[DependencyResolver],
			self.ws[ToolRunner],
			self.ws[Progress],
			java,
			jarjar,
			transitiveGroups = self.settings.jarjarDependencyResolveGroups,
			temporaryDirectory = temporaryDirectory)
		if outputDirectory is not None:
			outputDirectory = self.resolve(outputDirectory)
		return pipeline.shade(dependencyGroup, rules, outputDirectory)

def packageNames(sourceDirectory : Path) -> List[str]:
	"""
	Every directory under the source directory, as a package name.
	"""
	sourceDirectory = Path(sourceDirectory)
	if not sourceDirectory.isDirectory():
		return []
	return [
		d.relativeTo(sourceDirectory).relativeStr().replace("/",".")
		for d in sourceDirectory.getPreorder(includeSelf = False, deterministic = True)
		if d.isDirectory()
	]
