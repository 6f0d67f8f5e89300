from typing import Any, Dict, List, Final, TypeVar, Type

class ModuleInitContext():
	def __init__(self, workspace : 'Workspace') -> None:
		self._workspace = workspace

class Module():
	"""
	A unit of build logic living in a Workspace.

	Modules declare their dependencies by calling ws.add() in their constructor.
	Subclasses may set 'key' to the key of another module to stand in for it.
	"""
	key : Any

	def __init__(self, context : ModuleInitContext) -> None:
		self.ws : Final[Workspace] = context._workspace

	def __init_subclass__(cls) -> None:
		if "key" not in cls.__dict__:
			setattr(cls,"key",cls)

	def _downstream(self):
		"""
		Call this to run downstream modules.
		"""
		self.ws.run()

	def run(self):
		"""
		In the execution phase, run() is invoked for all modules in dependency order.
		That is, all dependencies have been ran before this is invoked.
		"""
		pass

class Workspace:
	'''
	A flow controller between a set of dependent 'Modules'.

	Use add() and use() to register modules. Every module is instantiated
	once, and modules are ordered such that each module occurs after the
	modules it added in its constructor.

	run() invokes run() on all modules in that order. A module may call
	_downstream() to run its dependents from within its own run(), for
	instance to report on them after they are done.
	'''
	T = TypeVar("T",bound = Module)

	def __init__(self):
		self.__activeModules : Dict[object,Module] = {}
		self.__inactiveModules : Dict[object,type] = {}
		self.__topology : List[Module] = []
		self.__topologyIndex : int = 0

	def __getitem__(self,mod : Type[T]) -> T:
		'''Fetch a specific module.'''
		realMod = self.__activeModules[mod.key]
		assert realMod is not None
		return realMod

	def __contains__(self,mod : Type[T]) -> bool:
		modInstance = self.__activeModules.get(mod.key,None)
		return modInstance is not None and isinstance(modInstance,mod)

	def run(self):
		'''Begin or continue executing modules.'''
		while self.__topologyIndex < len(self.__topology):
			module = self.__topology[self.__topologyIndex]
			self.__topologyIndex += 1
			module.run()

	def use(self,mod : Type[T]):
		'''
		Register the specific module as a non-default implementation.
		The module is only activated when any of it's dependents are activated.
		'''
		assert issubclass(mod, Module), "Only subclasses of Module are accepted!"
		key = mod.key
		assert key not in self.__inactiveModules and key not in self.__activeModules, \
			"use() or add() was already invoked for this module!"
		self.__inactiveModules[key] = mod
		return mod

	def add(self,mod : Type[T]) -> T:
		'''
		Register and activate the specific module.
		The module instance is returned.
		'''
		assert self.__topologyIndex == 0, "Cannot add modules after run is called!"
		assert issubclass(mod, Module), "Only subclasses of Module are accepted!"
		key = mod.key
		if key in self.__activeModules:
			assert self.__activeModules[key] is not None, f"Recursive call to add() with key {key}!"
			return self.__activeModules[key]
		mod = self.__inactiveModules.pop(key, mod)
		self.__activeModules[key] = None
		ins = mod(ModuleInitContext(self))
		self.__topology.append(ins)
		self.__activeModules[key] = ins
		return ins
