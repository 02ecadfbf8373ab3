"""A decorator to run a function under `asyncio.run`."""

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import ParamSpec, TypeVar

__all__ = ["run_with_asyncio"]

P = ParamSpec("P")
F = TypeVar("F")


def run_with_asyncio(
    f: Callable[P, Coroutine[None, None, F]],
) -> Callable[P, F]:
    """Run the decorated function with `asyncio.run`.

    Intended to be used as a decorator around an async Click command. The
    decorated function will be run with `asyncio.run` when invoked. The
    caller must not already be inside an asyncio task.

    Parameters
    ----------
    f
        The function to wrap.

    Examples
    --------
    .. code-block:: python

       @main.command()
       @run_with_asyncio
       async def install() -> None:
           async with httpx.AsyncClient() as http_client:
               factory = resolve_token_factory(config, http_client)
               token = await factory.get_access_token()
    """

    @wraps(f)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> F:
        return asyncio.run(f(*args, **kwargs))

    return wrapper
