"""
=============================================================================
MIDDLEWARE PIPELINE
=============================================================================

Every stage has the same shape:

    def __call__(self, request, next) -> response

and may do work before next(request), after it, or instead of it
(short-circuit). The pipeline is an explicit ordered list; first added is
outermost.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     userapi REQUEST FLOW                            │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   Request ──────────────────────────────────────────────►           │
    │                                                                     │
    │   ┌───────────┐    ┌───────────┐    ┌───────────┐    ┌──────────┐   │
    │   │   Error   │───►│   Auth    │───►│  Logging  │───►│  Router  │   │
    │   │ Boundary  │    │   Gate    │    │           │    │          │   │
    │   └─────┬─────┘    └─────┬─────┘    └─────┬─────┘    └────┬─────┘   │
    │         │                │                │               │         │
    │    try/except       401 + return     log "Request"    handler +     │
    │                     (short-circuit)                   store         │
    │         │                │                │               │         │
    │   ◄─────┴────────────────┴────────────────┴───────────────┘         │
    │    500 on failure                    log "Response"                 │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Dispatch walks the list by index, so the order is exactly the order of
pipeline.stages and a stage that returns without calling next() stops the
walk there.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional
import logging

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse


logger = logging.getLogger(__name__)


NextHandler = Callable[[HTTPRequest], HTTPResponse]


class Middleware(ABC):
    """
    A pipeline stage.

        class MyMiddleware(Middleware):
            def __call__(self, request, next):
                if not self.allowed(request):
                    return unauthorized()       # short-circuit
                response = next(request)        # continue the chain
                return response
    """

    @abstractmethod
    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        """
        Process the request.

        Args:
            request: The incoming request
            next: The rest of the pipeline; call it to continue

        Returns:
            The response, from next() or produced here
        """

    @property
    def name(self) -> str:
        return self.__class__.__name__


class MiddlewarePipeline:
    """
    An ordered list of middleware in front of a final handler.

        pipeline = MiddlewarePipeline()
        pipeline.use(ErrorBoundaryMiddleware(), AuthMiddleware(token), LoggingMiddleware())
        handler = pipeline.wrap(router.handle)

        handler(request)   # ErrorBoundary → Auth → Logging → router.handle
    """

    def __init__(self):
        self._middleware: List[Middleware] = []

    def add(self, middleware: Middleware) -> "MiddlewarePipeline":
        """Append a stage. Stages run in the order they are added."""
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {middleware.name}")
        return self

    def use(self, *middleware: Middleware) -> "MiddlewarePipeline":
        for mw in middleware:
            self.add(mw)
        return self

    @property
    def stages(self) -> List[str]:
        """Stage names, outermost first."""
        return [mw.name for mw in self._middleware]

    def wrap(self, handler: NextHandler) -> NextHandler:
        """
        Build the callable that runs every stage, then handler.

        The stage list is snapshotted here; adding middleware afterwards
        does not change an already wrapped handler.
        """
        stages = tuple(self._middleware)

        def dispatch(index: int, request: HTTPRequest) -> HTTPResponse:
            if index == len(stages):
                return handler(request)

            def next_stage(req: HTTPRequest) -> HTTPResponse:
                return dispatch(index + 1, req)

            return stages[index](request, next_stage)

        def pipeline(request: HTTPRequest) -> HTTPResponse:
            return dispatch(0, request)

        return pipeline

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(self._middleware)


class FunctionMiddleware(Middleware):
    """
    A plain function used as a stage.

        def add_header(request, next):
            response = next(request)
            response.headers["X-Custom"] = "value"
            return response

        pipeline.add(FunctionMiddleware(add_header))
    """

    def __init__(
        self,
        func: Callable[[HTTPRequest, NextHandler], HTTPResponse],
        name: Optional[str] = None
    ):
        self._func = func
        self._name = name or func.__name__

    def __call__(self, request: HTTPRequest, next: NextHandler) -> HTTPResponse:
        return self._func(request, next)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(
    func: Callable[[HTTPRequest, NextHandler], HTTPResponse]
) -> FunctionMiddleware:
    """Decorator turning a (request, next) function into middleware."""
    return FunctionMiddleware(func)
