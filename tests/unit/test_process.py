import sys

import pytest

from jarmill.path import Path
from jarmill.workspace import Workspace
from jarmill.operation.process import ToolRunner
from jarmill.exceptions import ProcessFailure

FLOOD = (
	"import sys\n"
	"for i in range(2000):\n"
	"    sys.stdout.write('o' * 1000 + '\\n')\n"
	"    sys.stderr.write('e' * 1000 + '\\n')\n"
)

def makeRunner():
	return Workspace().add(ToolRunner)

def test_large_output_on_both_streams_does_not_block():
	(rc, out, err) = makeRunner().runCommand([sys.executable, "-c", FLOOD])

	assert rc == 0
	assert len(out.splitlines()) == 2000
	assert len(err.splitlines()) == 2000

def test_command_runs_in_working_directory(tmp_path):
	(rc, out, _) = makeRunner().runCommand(
		[sys.executable, "-c", "import os; print(os.getcwd())"],
		workingDirectory = Path(tmp_path))

	assert rc == 0
	assert Path(out.decode().strip()) == Path(tmp_path)

def test_non_zero_exit_raises_with_message(capsys):
	with pytest.raises(ProcessFailure) as info:
		makeRunner().runTool([sys.executable, "-c", "import sys; print('broken'); sys.exit(3)"], "Compilation failed")

	assert info.value.getMessage() == "Compilation failed"
	assert info.value.returnCode == 3
	assert "broken" in capsys.readouterr().out

def test_missing_executable_raises_process_failure(tmp_path):
	with pytest.raises(ProcessFailure):
		makeRunner().runTool([tmp_path / "no-such-tool"], "Compilation failed")
