import os
import re
from typing import Dict
from jarmill.path import Path
from jarmill.progress import Progress
from jarmill.workspace import Module
from jarmill.operation.util import once
from jarmill.exceptions import ConfigurationError

DEFAULT_PROPERTIES_FILE = os.path.join("~", ".jarmill", "java.properties")

ERROR_MESSAGE = (
	"You must create the file [{file}] that contains the system configuration for the Java system. "
	"This file should include the location of the JDK (java and javac) by version. "
	"These properties look like this:\n\n"
	"  1.7=/Library/Java/JavaVirtualMachines/jdk1.7.0_10.jdk/Contents/Home\n"
	"  1.8=/Library/Java/JavaVirtualMachines/jdk1.8.0.jdk/Contents/Home\n"
	"  jarjar=/opt/jarjar/jarjar-1.4.jar\n"
)

PROPERTY_LINE = re.compile(r"\s*(?P<key>[^=:\s]+)\s*[=:]\s*(?P<value>.*?)\s*")

def loadProperties(file : Path) -> Dict[str,str]:
	"""
	Reads a properties file. Blank lines and lines starting with '#' or '!' are ignored.
	"""
	properties = {}
	with file.open("r",encoding = "utf-8") as input:
		for line in input:
			stripped = line.strip()
			if stripped == "" or stripped[0] in "#!":
				continue
			m = PROPERTY_LINE.fullmatch(line.rstrip("\r\n"))
			if m:
				properties[m["key"]] = m["value"]
	return properties

def executableName(name : str) -> str:
	if os.name == "nt":
		return name + ".exe"
	return name

class JavaToolchain(Module):
	"""
	Locations of the JDK binaries by Java version, and of the JarJar archive.

	The properties file is read on first use, and every lookup is cached
	for the lifetime of the workspace.
	"""
	def __init__(self, context) -> None:
		super().__init__(context)
		self.ws.add(Progress)
		self.propertiesFile = DEFAULT_PROPERTIES_FILE

	@once
	def getProperties(self) -> Dict[str,str]:
		file = Path(os.path.expanduser(str(self.propertiesFile)))
		if not file.isFile():
			raise ConfigurationError(ERROR_MESSAGE.format(file = file))
		self.ws[Progress].debug(f"Loading Java configuration from [{file}]")
		return loadProperties(file)

	@once
	def getJavaHome(self, javaVersion : str) -> Path:
		javaHome = self.getProperties().get(javaVersion,None)
		if not javaHome:
			raise ConfigurationError(
				f"No JDK is configured for version [{javaVersion}].\n\n"
				+ ERROR_MESSAGE.format(file = self.propertiesFile))
		return Path(os.path.expanduser(javaHome))

	@once
	def getTool(self, javaVersion : str, name : str) -> Path:
		"""
		The named binary of the JDK configured for the version. It must be an executable file.
		"""
		tool = self.getJavaHome(javaVersion).subpath(f"bin/{executableName(name)}")
		if not tool.isFile():
			raise ConfigurationError(f"The {name} tool [{tool}] does not exist.")
		if not tool.isExecutable():
			raise ConfigurationError(f"The {name} tool [{tool}] is not executable.")
		return tool

	def getJavac(self, javaVersion : str) -> Path:
		return self.getTool(javaVersion, "javac")

	def getJava(self, javaVersion : str) -> Path:
		return self.getTool(javaVersion, "java")

	def getJavadoc(self, javaVersion : str) -> Path:
		return self.getTool(javaVersion, "javadoc")

	@once
	def getJarJar(self, configured) -> Path:
		"""
		The JarJar archive. An explicitly configured location wins over the 'jarjar' property.
		"""
		if configured is None:
			configured = self.getProperties().get("jarjar",None)
		if not configured:
			raise ConfigurationError(
				"You must configure the location of the JarJar archive, either with the "
				"[jarjarPath] setting or with the [jarjar] property in the Java configuration file.")
		jarjar = Path(os.path.expanduser(str(configured)))
		if not jarjar.isFile():
			raise ConfigurationError(f"The JarJar archive [{jarjar}] does not exist.")
		return jarjar
