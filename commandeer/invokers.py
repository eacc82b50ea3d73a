"""
Invokers: the actor side of a dispatch.

The framework only needs three capabilities from whoever issues an invocation:
- has_permission(key) -> bool  (permission checks)
- kind() -> InvokerKind        (invoker-class checks)
- send_text(line)              (help output; lines are rich console markup)

Hosts adapt their own session/user objects to this protocol. ConsoleInvoker is a ready
implementation for terminal tools and tests that prints through a rich console.
"""
from typing import Protocol, runtime_checkable

from rich.console import Console

from .signatures import InvokerKind
from .utils import IntrospectiveType, Unset


@runtime_checkable
class Invoker(Protocol):
    def has_permission(self, key: str, /) -> bool: ...

    def kind(self) -> InvokerKind: ...

    def send_text(self, line: str, /) -> None: ...


class ConsoleInvoker(metaclass=IntrospectiveType):
    """
    An invoker backed by a rich console.

    Parameters
    - permissions: Iterable[str] of granted permission keys.
    - kind: InvokerKind reported to invoker-class checks (CLASS_B by default).
    - console: rich Console to print to (a fresh stdout console by default).
    - operator: when True every permission check passes.
    """
    __introspectable__ = (
        "permissions",
        "operator",
    )

    def __init__(self, permissions=(), /, kind=InvokerKind.CLASS_B, *, console=Unset, operator=False):
        if isinstance(permissions, str):
            raise TypeError(f"{type(self).__typename__} 'permissions' must be an iterable of strings")
        if not isinstance(kind, InvokerKind):
            raise TypeError(f"{type(self).__typename__} 'kind' must be an invoker kind")
        self._permissions = set(permissions)
        self._kind = kind
        self._console = Console() if console is Unset else console
        self._operator = bool(operator)

    def grant(self, *keys):
        self._permissions.update(keys)
        return self

    def revoke(self, *keys):
        self._permissions.difference_update(keys)
        return self

    def has_permission(self, key, /):
        return self._operator or key in self._permissions

    def kind(self):
        return self._kind

    def send_text(self, line, /):
        self._console.print(line, highlight=False)


__all__ = (
    "Invoker",
    "ConsoleInvoker",
)
