import functools
from typing import Callable, ParamSpec, TypeVar

A = TypeVar("A")
P = ParamSpec("P")

def once(fun : Callable[P,A]) -> Callable[P,A]:
	"""
	The decorated method is run only once per unique set of arguments.
	The result, or the exception, is cached on the instance.
	This does NOT support default arguments.
	"""
	attrName = f"_once{id(fun)}"
	@functools.wraps(fun)
	def wrapper(self, *args, **kwargs):
		key = (args,frozenset(kwargs.items()))
		cache = getattr(self, attrName, None)
		if cache is None:
			cache = dict()
			setattr(self, attrName, cache)
		if key not in cache:
			try:
				cache[key] = (False, fun(self, *args, **kwargs))
			except Exception as x:
				cache[key] = (True, x)
		(failed, value) = cache[key]
		if failed:
			raise value
		return value
	return wrapper
