from typing import Type
from jarmill.workspace import Module, Workspace
from jarmill.progress import Progress
from jarmill.exceptions import BuildException

def build(project : Type[Module], *implementations : Type[Module], verbose : bool = False) -> bool:
	"""
	Runs the project module in a fresh workspace.

	implementations are registered with use() first, so they stand in for the
	modules they replace. Build failures are reported and make the result False.
	"""
	w = Workspace()
	for i in implementations:
		w.use(i)
	w.add(project)

	if Progress in w:
		w[Progress].verbose = verbose

	try:
		w.run()
	except KeyboardInterrupt:
		print("Interrupted")
		return False
	except BuildException as x:
		x.report()
		return False
	return True
