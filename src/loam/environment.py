from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

from .types import LoamNameError, LoamValue

if TYPE_CHECKING:
    from .runtime import RunContext

class Environment:
    """One scope frame: a name -> value mapping plus the enclosing frame.

    Frames form a chain rooted at the global scope. ``ctx`` (the run's output
    sink, call depth and limits) is shared by every frame of a chain.
    """

    def __init__(self, parent: Optional['Environment'] = None, ctx: Optional['RunContext'] = None):
        self.parent = parent
        self.vars: Dict[str, LoamValue] = {}

        if ctx is not None:
            self.ctx = ctx
        elif parent is not None:
            self.ctx = parent.ctx
        else:
            self.ctx = None

    def child(self) -> 'Environment':
        return Environment(parent=self)

    def define(self, name: str, val: LoamValue) -> None:
        self.vars[name] = val

    def get(self, name: str) -> LoamValue:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                return env.vars[name]
            env = env.parent

        raise LoamNameError(name)

    def assign(self, name: str, val: LoamValue) -> None:
        env: Optional[Environment] = self

        while env is not None:
            if name in env.vars:
                env.vars[name] = val
                return
            env = env.parent

        raise LoamNameError(name, action="assign")
