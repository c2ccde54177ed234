"""
yieldarray - non-blocking array traversals for asyncio.

``every``, ``filter``, ``find``, ``findIndex``, ``forEach``, ``indexOf``,
``lastIndexOf``, ``map``, ``reduce``, ``reduceRight`` and ``some`` as
coroutines that work in adaptive, time-budgeted bursts and hand the event
loop back between bursts.

    >>> import asyncio
    >>> from yieldarray import async_reduce
    >>> asyncio.run(async_reduce([1, 2, 3, 4], lambda acc, x: acc + x, 0))
    Outcome(result=10, success=True)
"""

__version__ = "0.1.0"

from yieldarray.core import *  # noqa
from yieldarray.execution import *  # noqa
