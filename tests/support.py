import os
import zipfile
from typing import Callable, Dict, List, Tuple

from jarmill.operation.process import ToolRunner

class FakeToolRunner(ToolRunner):
	"""
	Records commands instead of running them. Set 'handler' to simulate a tool.
	"""
	key = ToolRunner.key

	def __init__(self, context) -> None:
		super().__init__(context)
		self.commands : List[List[str]] = []
		self.workingDirectories : List[str] = []
		self.handler : Callable[[List[str]],Tuple[int,bytes,bytes]] = None

	def runCommand(self, command, workingDirectory = None, input = None):
		command = [str(c) for c in command]
		self.commands.append(command)
		self.workingDirectories.append(None if workingDirectory is None else str(workingDirectory))
		if self.handler is None:
			return (0, b"", b"")
		return self.handler(command)

def writeJar(path, entries : Dict[str,bytes]):
	path = os.fspath(path)
	os.makedirs(os.path.dirname(path), exist_ok = True)
	with zipfile.ZipFile(path, "w") as output:
		for (name, data) in entries.items():
			output.writestr(name, data)
	return path

def setModifiedTime(path, seconds : float):
	os.utime(os.fspath(path), (seconds, seconds))

def writeFile(path, text = "", seconds : float = None):
	path = os.fspath(path)
	os.makedirs(os.path.dirname(path), exist_ok = True)
	with open(path, "w", encoding = "utf-8") as output:
		output.write(text)
	if seconds is not None:
		setModifiedTime(path, seconds)
	return path

def fakeJarJar(command : List[str]) -> Tuple[int,bytes,bytes]:
	"""
	Applies 'rule a.b.** x.y.@1' style rules to class entries, like JarJar does.
	"""
	(rulesFile, inputJar, outputJar) = command[command.index("process") + 1:]
	rules = []
	with open(rulesFile, encoding = "utf-8") as input:
		for line in input:
			(_, fromPattern, toPattern) = line.split()
			assert fromPattern.endswith(".**") and toPattern.endswith(".@1")
			rules.append((fromPattern[:-2].replace(".","/"), toPattern[:-2].replace(".","/")))
	with zipfile.ZipFile(inputJar) as input, zipfile.ZipFile(outputJar, "w") as output:
		for name in input.namelist():
			target = name
			for (fromPrefix, toPrefix) in rules:
				if name.startswith(fromPrefix) and name.endswith(".class"):
					target = toPrefix + name[len(fromPrefix):]
					break
			output.writestr(target, input.read(name))
		output.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\r\n")
	return (0, b"", b"")

