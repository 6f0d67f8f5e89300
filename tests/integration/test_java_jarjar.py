import os
import zipfile

import pytest

from jarmill.path import Path
from jarmill.dependency import Artifact
from jarmill.progress import Progress
from jarmill.shading import Rule, JarJarRules, ShadingPipeline, STAGE_CLEANED
from jarmill.exceptions import IOFailure, ProcessFailure, ValidationError
from support import fakeJarJar, writeJar

def vendorJar(tmp_path, name = "vendor-1.0.jar", entries = None):
	if entries is None:
		entries = {
			"META-INF/MANIFEST.MF": b"Manifest-Version: 1.0\r\n",
			"META-INF/VENDOR.SF": b"signature",
			"META-INF/VENDOR.RSA": b"key",
			"com/vendor/Foo.class": b"foo",
		}
	return Path(writeJar(tmp_path / "repo" / name, entries))

def temporaryLeftovers(tmp_path):
	return os.listdir(tmp_path / "tmp")

def test_classes_are_renamed_into_the_output(project, tools, resolver, tmp_path):
	resolver.declare("shaded", Artifact(vendorJar(tmp_path)))
	tools.handler = fakeJarJar

	installed = project.jarjar("shaded", "build/classes/main",
		lambda r: r.rule("com.vendor.**", "com.myproject.shaded.@1"))

	output = project.resolve("build/classes/main")
	assert "com/myproject/shaded/Foo.class" in installed
	assert output.resolve("com/myproject/shaded/Foo.class").isFile()
	assert not output.resolve("com/vendor").isPresent()
	assert not output.resolve("META-INF/MANIFEST.MF").isPresent()
	assert not output.resolve("META-INF/VENDOR.SF").isPresent()
	assert temporaryLeftovers(tmp_path) == []

def test_jarjar_command_and_rules_file(project, tools, resolver, tmp_path):
	resolver.declare("shaded", Artifact(vendorJar(tmp_path)))
	seen = {}
	def recordingJarJar(command):
		rulesFile = command[command.index("process") + 1]
		seen["name"] = os.path.basename(rulesFile)
		with open(rulesFile, encoding = "utf-8") as input:
			seen["rules"] = input.read()
		return fakeJarJar(command)
	tools.handler = recordingJarJar

	project.jarjar("shaded", "build/classes/main", [
		Rule("com.vendor.**", "com.myproject.first.@1"),
		Rule("org.other.**", "com.myproject.other.@1"),
		Rule("com.vendor.**", "com.myproject.shaded.@1"),
	])

	(command,) = tools.commands
	assert command[:5] == [
		str(Path(tmp_path / "jdk" / "bin" / "java")),
		"-jar",
		str(Path(tmp_path / "tools" / "jarjar-1.4.jar")),
		"process",
		command[4],
	]
	assert seen["name"].startswith("jarjar") and seen["name"].endswith("rules")
	assert seen["rules"] == "rule com.vendor.** com.myproject.shaded.@1\nrule org.other.** com.myproject.other.@1\n"

def test_transitive_dependencies_follow_compile_and_runtime_only(project, tools, resolver, tmp_path):
	runtime = Artifact(vendorJar(tmp_path, "runtime.jar", {"com/vendor/Runtime.class": b"r"}))
	testOnly = Artifact(vendorJar(tmp_path, "junit.jar", {"com/vendor/Test.class": b"t"}))
	resolver.declare("shaded", Artifact(vendorJar(tmp_path), dependencies = {"runtime": [runtime], "test-compile": [testOnly]}))
	tools.handler = fakeJarJar

	installed = project.jarjar("shaded", "build/classes/main", JarJarRules().rule("com.vendor.**", "com.myproject.shaded.@1"))

	assert "com/myproject/shaded/Runtime.class" in installed
	assert "com/myproject/shaded/Test.class" not in installed

def test_later_archive_wins_on_same_entry(project, tools, resolver, tmp_path):
	resolver.declare("shaded",
		Artifact(vendorJar(tmp_path, "a.jar", {"com/vendor/Foo.class": b"first"})),
		Artifact(vendorJar(tmp_path, "b.jar", {"com/vendor/Foo.class": b"second"})))
	tools.handler = fakeJarJar

	project.jarjar("shaded", "build/classes/main", JarJarRules().rule("com.vendor.**", "com.myproject.shaded.@1"))

	with project.resolve("build/classes/main/com/myproject/shaded/Foo.class").open("r") as input:
		assert input.read() == b"second"

def test_failed_rewrite_cleans_up(project, tools, resolver, tmp_path):
	resolver.declare("shaded", Artifact(vendorJar(tmp_path)))
	tools.handler = lambda command: (1, b"", b"Exception in thread main")

	with pytest.raises(ProcessFailure) as info:
		project.jarjar("shaded", "build/classes/main", JarJarRules().rule("com.vendor.**", "x.@1"))

	assert info.value.getMessage() == "JarJar failed for dependency group [shaded]"
	assert temporaryLeftovers(tmp_path) == []
	assert not project.resolve("build/classes/main").isPresent()

def test_missing_rewrite_output_is_a_failure(project, tools, resolver, tmp_path):
	resolver.declare("shaded", Artifact(vendorJar(tmp_path)))

	with pytest.raises(ProcessFailure):
		project.jarjar("shaded", "build/classes/main", JarJarRules().rule("com.vendor.**", "x.@1"))

	assert temporaryLeftovers(tmp_path) == []

def test_corrupt_archive_is_an_io_failure(project, tools, resolver, tmp_path):
	corrupt = tmp_path / "repo" / "corrupt.jar"
	corrupt.parent.mkdir(parents = True)
	corrupt.write_bytes(b"not a zip file")
	resolver.declare("shaded", Artifact(Path(corrupt)))
	tools.handler = fakeJarJar

	with pytest.raises(IOFailure) as info:
		project.jarjar("shaded", "build/classes/main", JarJarRules().rule("com.vendor.**", "x.@1"))

	assert "exploding archives" in info.value.getMessage()
	assert tools.commands == []
	assert temporaryLeftovers(tmp_path) == []

@pytest.mark.parametrize("group, output, rules", [
	("", "build/classes/main", [Rule("a.**", "b.@1")]),
	("shaded", None, [Rule("a.**", "b.@1")]),
	("shaded", "build/classes/main", lambda r: r.rule("a.**", "")),
])
def test_invalid_requests_create_nothing(project, tools, group, output, rules, tmp_path):
	with pytest.raises(ValidationError):
		project.jarjar(group, output, rules)

	assert tools.commands == []
	assert temporaryLeftovers(tmp_path) == []

def test_pipeline_ends_cleaned_after_failure(project, tools, resolver, tmp_path):
	resolver.declare("shaded", Artifact(vendorJar(tmp_path)))
	tools.handler = lambda command: (2, b"", b"")
	pipeline = ShadingPipeline(resolver, tools, project.ws[Progress],
		Path(tmp_path / "jdk" / "bin" / "java"), Path(tmp_path / "tools" / "jarjar-1.4.jar"),
		temporaryDirectory = Path(tmp_path / "tmp"))

	with pytest.raises(ProcessFailure):
		pipeline.shade("shaded", JarJarRules().rule("com.vendor.**", "x.@1"), Path(tmp_path / "out"))

	assert pipeline.stage == STAGE_CLEANED
	assert temporaryLeftovers(tmp_path) == []
