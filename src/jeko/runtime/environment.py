"""Environment chain: scopes of name bindings linked innermost first."""

from __future__ import annotations

from typing import Iterator

from jeko.runtime.errors import ScopeMismatch, UnboundVariable
from jeko.runtime.value import Value


class Environment:
    """A mutable scope with a shared link to its enclosing scope.

    Environments are passed around by reference. Every holder of a scope,
    including closures captured at different times, observes and mutates the
    same bindings, and a captured scope stays alive as long as the closure
    does. The global scope has no enclosing link.
    """

    def __init__(
        self,
        values: dict[str, Value] | None = None,
        enclosing: Environment | None = None,
    ) -> None:
        self.values: dict[str, Value] = values if values is not None else {}
        self.enclosing = enclosing

    def define(self, name: str, value: Value) -> None:
        """Bind ``name`` in this scope, overwriting an existing binding."""
        self.values[name] = value

    def enclose(self) -> Environment:
        """Create a child scope of this one."""
        return Environment(enclosing=self)

    def ancestor(self, distance: int, name: str = "<scope>") -> Environment:
        """Return the scope ``distance`` links up the chain."""
        environment = self
        for _ in range(distance):
            if environment.enclosing is None:
                raise ScopeMismatch(name, distance)
            environment = environment.enclosing
        return environment

    def global_scope(self) -> Environment:
        environment = self
        while environment.enclosing is not None:
            environment = environment.enclosing
        return environment

    def get_at(self, distance: int, name: str) -> Value:
        """Read ``name`` from exactly the scope ``distance`` links up.

        Raises:
            ScopeMismatch: If that scope has no such binding; the resolver
                and the runtime chain disagree.
        """
        values = self.ancestor(distance, name).values
        if name not in values:
            raise ScopeMismatch(name, distance)
        return values[name]

    def assign_at(self, distance: int, name: str, value: Value) -> None:
        values = self.ancestor(distance, name).values
        if name not in values:
            raise ScopeMismatch(name, distance)
        values[name] = value

    def get(self, name: str) -> Value:
        """Read ``name`` from the innermost scope that binds it.

        Raises:
            UnboundVariable: If no scope in the chain binds the name.
        """
        for environment in self._chain():
            if name in environment.values:
                return environment.values[name]
        raise UnboundVariable(name)

    def assign(self, name: str, value: Value) -> None:
        """Overwrite ``name`` in the innermost scope that binds it."""
        for environment in self._chain():
            if name in environment.values:
                environment.values[name] = value
                return
        raise UnboundVariable(name)

    def assign_global(self, name: str, value: Value) -> bool:
        """Overwrite ``name`` in the global scope only.

        Returns:
            False if the global scope does not already bind the name.
        """
        values = self.global_scope().values
        if name not in values:
            return False
        values[name] = value
        return True

    def names(self) -> list[str]:
        """All names visible from this scope, innermost first, without duplicates."""
        seen: dict[str, None] = {}
        for environment in self._chain():
            for name in environment.values:
                seen.setdefault(name, None)
        return list(seen)

    def _chain(self) -> Iterator[Environment]:
        environment: Environment | None = self
        while environment is not None:
            yield environment
            environment = environment.enclosing

    def __repr__(self) -> str:
        depth = sum(1 for _ in self._chain())
        return f"Environment({len(self.values)} bindings, depth {depth})"
