import sys
from typing import List
from jarmill.workspace import Module

TICK_PENDING = 0
TICK_RUNNING = 1
TICK_SKIPPED = 2
TICK_UP_TO_DATE = 3
TICK_DONE = 4
TICK_FAILED = 5
TICK_STOPPED = 6
NAME_SET = 7

class ProgressUnit():
	"""
	One reported step of the build. Use as a context manager:
	the unit must be marked running or up to date before leaving normally,
	and leaving with an exception marks it failed (or skipped, if it never started).
	"""
	def __init__(self, changeListener) -> None:
		self.__state = TICK_PENDING
		self.__r = changeListener
		self.__name = None
		self._pid = None

	def setName(self, name : str):
		self.__name = name
		self.__r(self,NAME_SET)

	def getName(self):
		return self.__name

	def setRunning(self):
		self.__state = TICK_RUNNING
		self.__r(self,TICK_RUNNING)

	def setUpToDate(self):
		self.__state = TICK_UP_TO_DATE
		self.__r(self,TICK_UP_TO_DATE)

	def getState(self):
		return self.__state

	def __enter__(self):
		return self

	def __exit__(self, exct, excc, excs):
		if excc is None:
			assert self.__state is not TICK_PENDING, \
				"ProgressUnit Must be marked as either running or up-to-date before exiting normally."
			if self.__state is TICK_RUNNING:
				self.__state = TICK_DONE
				self.__r(self, TICK_DONE)
		elif self.__state is TICK_PENDING:
			self.__state = TICK_SKIPPED
			self.__r(self, TICK_SKIPPED)
		elif self.__state is TICK_RUNNING:
			if isinstance(excc, KeyboardInterrupt):
				self.__state = TICK_STOPPED
				self.__r(self, TICK_STOPPED)
			else:
				self.__state = TICK_FAILED
				self.__r(self, TICK_FAILED)

class Progress(Module):
	"""
	Console output of the build.

	info() lines are always printed, debug() lines only in verbose mode.
	Units registered with register() report their transitions in verbose mode,
	and failures in any mode. A summary is printed after the workspace finishes.
	"""
	def __init__(self, context) -> None:
		super().__init__(context)
		self.__sequence : List[ProgressUnit] = []
		self.verbose = False
		self.__counter = 0

	def run(self):
		try:
			self._downstream()
		finally:
			if len(self.__sequence) != 0:
				print(self.summary())

	def info(self, message : str):
		print(message)

	def debug(self, message : str):
		if self.verbose:
			print(message)

	def error(self, message : str):
		print(message, file = sys.stderr)

	def register(self, name : str = None):
		unit = ProgressUnit(self.__onUnitChange)
		self.__sequence.append(unit)
		if name is not None:
			unit.setName(name)
		return unit

	def count(self, type):
		return sum(x.getState() == type for x in self.__sequence)

	def __onUnitChange(self, unit : ProgressUnit, changeType):
		if unit._pid is None:
			self.__counter += 1
			unit._pid = self.__counter
		if changeType == NAME_SET:
			return
		if not self.verbose and changeType != TICK_FAILED:
			return
		unitName = unit.getName()
		if changeType == TICK_RUNNING:
			detail = f"[{unit._pid}] Started: {unitName}"
		elif changeType == TICK_DONE:
			detail = f"[{unit._pid}] Done."
		elif changeType == TICK_FAILED:
			detail = f"[{unit._pid}] Failed: {unitName}"
		elif changeType == TICK_SKIPPED:
			detail = f"[{unit._pid}] Skipped."
		elif changeType == TICK_UP_TO_DATE:
			detail = f"[{unit._pid}] Up to date."
		elif changeType == TICK_STOPPED:
			detail = f"[{unit._pid}] Stopped."
		else:
			return
		print(f" {detail}")

	def summary(self) -> str:
		nameList = [
			(TICK_PENDING,"pending"),
			(TICK_RUNNING,"running"),
			(TICK_DONE,"succeeded"),
			(TICK_UP_TO_DATE,"up to date"),
			(TICK_FAILED,"failed"),
			(TICK_SKIPPED,"skipped"),
			(TICK_STOPPED,"stopped")
		]
		reports = []
		for (t,n) in nameList:
			count = self.count(t)
			if count != 0:
				if count == len(self.__sequence):
					count = "All"
				reports.append(f"{count} {n}")
		return ", ".join(reports) + "."
