import stat

import pytest

from jarmill.path import Path
from jarmill.workspace import Workspace
from jarmill.toolchain import JavaToolchain
from jarmill.dependency import StaticDependencyResolver, DependencyResolver
from jarmill.operation.process import ToolRunner
from jarmill.languages.java import JavaProject
from support import FakeToolRunner, writeJar

@pytest.fixture
def jdk(tmp_path):
	"""
	A JDK directory with stand-in binaries, and the properties file pointing to it.
	"""
	home = tmp_path / "jdk"
	(home / "bin").mkdir(parents = True)
	for name in ("javac","java","javadoc"):
		tool = home / "bin" / name
		tool.write_text("#!/bin/sh\nexit 0\n", encoding = "utf-8")
		tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
	jarjar = tmp_path / "tools" / "jarjar-1.4.jar"
	writeJar(jarjar, {"com/tonicsystems/jarjar/Main.class": b"main"})
	properties = tmp_path / "java.properties"
	properties.write_text(f"# Java configuration\n1.8={home}\njarjar={jarjar}\n", encoding = "utf-8")
	return properties

@pytest.fixture
def workspace():
	w = Workspace()
	w.use(FakeToolRunner)
	w.use(StaticDependencyResolver)
	return w

@pytest.fixture
def project(tmp_path, jdk, workspace) -> JavaProject:
	projectDir = tmp_path / "project"
	projectDir.mkdir()
	(tmp_path / "tmp").mkdir()
	p = workspace.add(JavaProject)
	p.directory = Path(projectDir)
	p.name = "test-project"
	p.version = "1.0.0"
	p.settings.javaVersion = "1.8"
	p.settings.temporaryDirectory = str(tmp_path / "tmp")
	workspace[JavaToolchain].propertiesFile = str(jdk)
	return p

@pytest.fixture
def tools(project) -> FakeToolRunner:
	return project.ws[ToolRunner]

@pytest.fixture
def resolver(project) -> StaticDependencyResolver:
	return project.ws[DependencyResolver]
