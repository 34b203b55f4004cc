"""
auth/pipeline.py -- Ordered request-processing stages.

Pattern: Interceptor / Chain of Responsibility, made explicit. A stage is any
callable taking the RequestContext. Stages run in list order on the same
context object; a stage refuses the request by raising AccessDenied, which
propagates to the caller (the HTTP middleware). Nothing else short-circuits.

The standard pipeline is [RequestAuthenticationGate, AccessPolicy].

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from auth.models import RequestContext

Stage = Callable[[RequestContext], None]


class RequestPipeline:
    def __init__(self, stages: Iterable[Stage] = ()) -> None:
        self.stages: list[Stage] = list(stages)

    def run(self, context: RequestContext) -> RequestContext:
        """Run every stage in order and return the (mutated) context.

        Raises AccessDenied if a stage refuses the request.
        """
        for stage in self.stages:
            stage(context)
        return context

    def __repr__(self) -> str:
        names = ", ".join(getattr(s, "name", type(s).__name__) for s in self.stages)
        return f"RequestPipeline([{names}])"
