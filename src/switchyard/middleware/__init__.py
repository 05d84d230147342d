"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, response: ResponseWriter, next: Next) -> None

Chain machinery:
    Link -- a registered middleware/handler with its resolved arity
    run_chain -- execute links in order with one-shot continuations
"""

from switchyard.middleware.chain import Continuation, Link, run_chain, wrap_all
from switchyard.middleware.protocol import Middleware, Next

__all__ = [
    "Continuation",
    "Link",
    "Middleware",
    "Next",
    "run_chain",
    "wrap_all",
]
