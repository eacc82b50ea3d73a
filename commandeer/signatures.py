"""
Command signatures: identity, access policy and display metadata of one command.

A Signature is an immutable value object handed to a Command at construction. It holds
- identity: name and aliases (matched case-insensitively against invocation tokens),
- access policy: the InvokerClass restriction and an optional permission key,
- display metadata: an arguments hint and a description (help output only).

The access check (permitted) is the single primitive shared by dispatch, completion
and help rendering.
"""
import re
from collections.abc import Iterable
from enum import Enum

from .utils import IntrospectiveType, Unset, coalesce


class InvokerKind(Enum):
    """
    What kind of actor issued an invocation (reported by Invoker.kind()).
    """
    CLASS_A = "class-a"
    CLASS_B = "class-b"
    OTHER = "other"


class InvokerClass(Enum):
    """
    Which invoker kinds may reach a command directly.

    SUB_COMMAND marks a command that is only valid as a child of another command. It
    carries no restriction of its own, so it admits every kind.
    """
    ANY = "any"
    CLASS_A = "class-a"
    CLASS_B = "class-b"
    CLASS_A_OR_B = "class-a-or-b"
    SUB_COMMAND = "sub-command"

    def admits(self, kind, /):
        match self:
            case InvokerClass.CLASS_A:
                return kind is InvokerKind.CLASS_A
            case InvokerClass.CLASS_B:
                return kind is InvokerKind.CLASS_B
            case InvokerClass.CLASS_A_OR_B:
                return kind is InvokerKind.CLASS_A or kind is InvokerKind.CLASS_B
            case _:
                return True


def _process_identifier(cls, field, object):
    if not isinstance(object, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if not (object := object.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    if re.search(r"\s", object):
        raise ValueError(f"{cls.__typename__} {field!r} cannot contain whitespace")
    return object


class Signature(metaclass=IntrospectiveType):
    """
    Static metadata of a command.

    Parameters
    - name: str
      Unique identifier among siblings (compared case-insensitively).
    - invoker_class: InvokerClass
      Restriction on the invoker kind. Top-level commands use any value but SUB_COMMAND;
      children must use SUB_COMMAND.
    - description: str
      Display-only text. An intermediate command with children is listed in help only
      when it carries a description.
    - aliases: Iterable[str]
      Extra identifiers. Declaration order is kept for display.
    - permission: str | None
      Capability key checked against the invoker; empty or None means unrestricted.
    - arguments: str
      Display-only hint of what follows the command (e.g. "<player> [reason]").

    Raises
    - TypeError on wrongly typed values, ValueError on empty or whitespace-containing
      identifiers and on aliases repeating the name or each other.
    """
    __introspectable__ = (
        "name",
        "aliases",
        "invoker_class",
        "permission",
        "arguments",
        "description",
    )

    def __init__(
            self,
            name,
            /,
            invoker_class=InvokerClass.ANY,
            description="",
            *,
            aliases=(),
            permission=Unset,
            arguments="",
    ):
        cls = type(self)
        name = _process_identifier(cls, "name", name)

        if isinstance(aliases, str) or not isinstance(aliases, Iterable):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        seen = {name.casefold()}
        normalized = []
        for alias in aliases:
            alias = _process_identifier(cls, "aliases", alias)
            if alias.casefold() in seen:
                raise ValueError(f"{cls.__typename__} alias {alias!r} repeats its name or another alias")
            seen.add(alias.casefold())
            normalized.append(alias)

        if not isinstance(invoker_class, InvokerClass):
            raise TypeError(f"{cls.__typename__} 'invoker_class' must be an invoker class")

        permission = coalesce(permission, "")
        if permission is None:
            permission = ""
        for field, object in (("permission", permission), ("arguments", arguments), ("description", description)):
            if not isinstance(object, str):
                raise TypeError(f"{cls.__typename__} {field!r} must be a string")

        self._name = name
        self._aliases = tuple(normalized)
        self._invoker_class = invoker_class
        self._permission = permission.strip()
        self._arguments = arguments.strip()
        self._description = description.strip()
        self._keys = frozenset(seen)

    def __setattr__(self, name, value):
        if hasattr(self, "_keys"):
            raise AttributeError(f"{type(self).__typename__} is immutable")
        super().__setattr__(name, value)

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    @property
    def keys(self):
        """
        Casefolded name and aliases: every token that resolves to this command.
        """
        return self._keys

    def matches(self, token, /):
        return isinstance(token, str) and token.casefold() in self._keys


def permitted(invoker, signature, /):
    """
    The access check: invoker-class compatibility AND permission compatibility.

    An empty permission always passes; otherwise the invoker must hold the key.
    """
    if not signature.invoker_class.admits(invoker.kind()):
        return False
    return not signature.permission or bool(invoker.has_permission(signature.permission))


__all__ = (
    "InvokerKind",
    "InvokerClass",
    "Signature",
    "permitted",
)
