"""
Commandeer command layer: command nodes, subcommand trees and sibling validation.

What this module provides
- Command: one command's business logic plus its ordered children (subcommands).
  Subclass it and override on_invoke (and optionally on_suggest), or build one from a
  plain function with command(...).
- command(...): create a function-backed Command or a decorator that produces one.
- check_conflicts(siblings, command): the single name/alias validation used both for
  the registry's top-level set and for one node's children.

Quick start
    from commandeer import Registry, command, InvokerClass

    @command(permission="shop.use", arguments="<item>")
    def buy(invoker, label, arguments):
        "Buy an item."
        invoker.send_text("bought %s" % " ".join(arguments))

    @buy.command(permission="shop.bulk")
    def bulk(invoker, label, arguments):
        "Buy in bulk."

    dispatcher = Registry(help=True).add(buy).build()

Design notes
- A node owns its children exclusively: it can be attached once, never to itself or to
  one of its descendants.
- Children must be SUB_COMMAND commands; SUB_COMMAND commands are only valid as children.
- Trees are sealed when a registry builds a dispatcher; attaching to a sealed node fails.
"""
import inspect
import logging

from .faults import *
from .signatures import InvokerClass, Signature
from .utils import *

logger = logging.getLogger(__name__)


def signature_of(command, scope, /):
    """
    Return the command's signature, failing fast when the node cannot be registered.
    """
    if not isinstance(command, Command):
        raise TypeError(f"{scope} must be a command, not {type(command).__name__!r}")
    signature = getattr(command, "_signature", None)
    if not isinstance(signature, Signature):
        raise MissingSignatureError(
            "%s of type %r has no signature" % (scope, type(command).__name__),
            title="missing signature",
            code=FaultCode.MISSING_SIGNATURE,
            hint="pass a Signature to Command.__init__ (call super().__init__(signature) in subclasses)",
        )
    return signature


def check_conflicts(siblings, command, /, *, scope="command", reserved=()):
    """
    Validate that command may join a sibling set.

    Checks, in order
    - the name is not already used as a sibling name,
    - no alias is a sibling name,
    - no alias is a sibling alias,
    - the name is not a sibling alias,
    - neither the name nor any alias is one of the reserved tokens.

    All comparisons are case-insensitive. Nothing is mutated: on failure the sibling
    set is left exactly as it was.

    Parameters
    - siblings: Iterable[Command]
    - command: Command
    - scope: "command" | "subcommand" (wording of the messages)
    - reserved: Iterable[str] tokens that no sibling may claim (e.g. "help")

    Raises
    - DuplicatedNameError, AliasConflictError, ReservedNameError
    """
    signature = signature_of(command, scope)
    names = {}
    aliases = {}
    for sibling in siblings:
        names[sibling.signature.name.casefold()] = sibling
        for alias in sibling.signature.aliases:
            aliases[alias.casefold()] = sibling

    name = signature.name
    if name.casefold() in names:
        raise DuplicatedNameError(
            "cannot register %r: name already registered as %s" % (name, scope),
            title="duplicated name",
            code=FaultCode.DUPLICATED_NAME,
            hint="give every %s a unique name" % scope,
            name=name,
            scope=scope,
        )

    for alias in signature.aliases:
        if alias.casefold() in names:
            raise AliasConflictError(
                "cannot register %r: alias %r is already the name of another %s" % (name, alias, scope),
                title="alias conflicts with name",
                code=FaultCode.ALIAS_NAME_CONFLICT,
                hint="drop or rename the alias %r" % alias,
                name=name,
                alias=alias,
                scope=scope,
            )

    for alias in signature.aliases:
        if alias.casefold() in aliases:
            raise AliasConflictError(
                "cannot register %r: alias %r is already an alias of %r" % (
                    name, alias, aliases[alias.casefold()].signature.name
                ),
                title="alias conflicts with alias",
                code=FaultCode.ALIAS_ALIAS_CONFLICT,
                hint="drop or rename the alias %r" % alias,
                name=name,
                alias=alias,
                scope=scope,
            )

    if name.casefold() in aliases:
        raise AliasConflictError(
            "cannot register %r: name is already an alias of %r" % (name, aliases[name.casefold()].signature.name),
            title="name conflicts with alias",
            code=FaultCode.NAME_ALIAS_CONFLICT,
            hint="rename the %s or drop the conflicting alias" % scope,
            name=name,
            scope=scope,
        )

    reserved = {token.casefold() for token in reserved}
    for key in (name, *signature.aliases):
        if key.casefold() in reserved:
            raise ReservedNameError(
                "cannot register %r: %r is reserved" % (name, key),
                title="reserved name",
                code=FaultCode.RESERVED_NAME,
                hint="rename the %s; %r is handled by the dispatcher itself" % (scope, key),
                name=name,
                token=key,
                scope=scope,
            )


class Command(metaclass=IntrospectiveType):
    """
    A node of the command tree.

    Responsibilities
    - Holds its Signature (identity, access policy, display metadata).
    - Owns its children in registration order; help lists them in that order.
    - Implements the handler contract:
      • on_invoke(invoker, label, arguments): run the command with the residual tokens.
      • on_suggest(invoker, label, arguments): completion candidates, or None for
        “no opinion”.

    Lifecycle
    - Constructed by the application, wired with attach()/command() and sealed when a
      registry builds a dispatcher. After that the subtree is read-only.
    """
    __introspectable__ = (
        "signature",
        "parent",
        "children",
        "sealed",
    )

    __displayable__ = (
        "signature",
        "children",
    )

    def __init__(self, signature, /):
        if not isinstance(signature, Signature):
            raise TypeError(f"{type(self).__typename__} 'signature' must be a signature")
        self._signature = signature
        self._parent = None
        self._children = []
        self._sealed = False

    @property
    def name(self):
        return self.signature.name

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command._parent:
            path.append(command := command._parent)
        return tuple(reversed(path))

    def lookup(self, token, /):
        """
        Return the child whose name or alias matches token (case-insensitive), or None.
        """
        for child in self._children:
            if child.signature.matches(token):
                return child
        return None

    def attach(self, command, /):
        """
        Attach command as a child of this node.

        Raises
        - SealedCommandError: this tree was already built into a dispatcher.
        - MissingSignatureError: command has no signature.
        - AttachedCommandError: command already has a parent, or attaching it would
          create a cycle.
        - CommandTypeError: command is not a SUB_COMMAND command.
        - DuplicatedNameError / AliasConflictError: see check_conflicts().

        Returns
        - self, so attachments can be chained.
        """
        if self._sealed:
            raise SealedCommandError(
                "cannot attach to %r: its tree is already built" % self.name,
                title="sealed command",
                code=FaultCode.SEALED_COMMAND,
                hint="attach every subcommand before building the dispatcher",
                name=self.name,
            )
        signature = signature_of(command, "subcommand")

        if command._parent is not None or command in self.path:
            raise AttachedCommandError(
                "cannot attach %r under %r: it already belongs to a command tree" % (signature.name, self.name),
                title="attached command",
                code=FaultCode.ATTACHED_COMMAND,
                hint="create a separate command instance for every place it is used",
                name=signature.name,
            )

        if signature.invoker_class is not InvokerClass.SUB_COMMAND:
            raise CommandTypeError(
                "cannot attach %r: command type must be %s" % (signature.name, InvokerClass.SUB_COMMAND.name),
                title="wrong command type",
                code=FaultCode.WRONG_COMMAND_TYPE,
                hint="declare subcommands with invoker_class=InvokerClass.SUB_COMMAND",
                name=signature.name,
            )

        check_conflicts(self._children, command, scope="subcommand")
        self._children.append(command)
        command._parent = self
        logger.debug("attached subcommand %r under %r", signature.name, self.name)
        return self

    def seal(self):
        """
        Freeze this node and its whole subtree.
        """
        self._sealed = True
        for child in self._children:
            child.seal()
        return self

    def command(self, source=Unset, /, **options):
        """
        Create a function-backed subcommand and attach it here.

        Same invocation modes as command(...); invoker_class defaults to SUB_COMMAND.
        Returns the child (or a decorator returning it), so trees can be nested:

            @tool.command
            def sub(invoker, label, arguments): ...

            @sub.command(permission="tool.deep")
            def deep(invoker, label, arguments): ...
        """
        @rename("command")
        def wrapper(source, /):
            child = command(source, **{"invoker_class": InvokerClass.SUB_COMMAND} | options)
            self.attach(child)
            return child

        return wrapper(source) if source is not Unset else wrapper

    def on_invoke(self, invoker, label, arguments):
        raise NotImplementedError(f"{type(self).__typename__} must implement on_invoke()")

    def on_suggest(self, invoker, label, arguments):
        return None


class FunctionCommand(Command):
    """
    A Command whose handler is a plain function callback(invoker, label, arguments).

    Suggestions come from an optional completer registered once with @cmd.completer.
    """

    def __init__(self, callback, signature, /):
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} 'callback' must be callable")
        super().__init__(signature)
        self._callback = callback
        self._completer = Unset

    def completer(self, completer, /):
        """
        Register the suggestion callback completer(invoker, label, arguments).

        Rules
        - Must be callable.
        - Can be set only once per command.

        Returns
        - The same callable, enabling decorator-style usage: @cmd.completer
        """
        if not callable(completer):
            raise TypeError(f"{type(self).__typename__} completer must be callable")
        if self._completer is not Unset:
            raise TypeError(f"{type(self).__typename__} completer cannot be overridden")
        self._completer = completer
        return completer

    def on_invoke(self, invoker, label, arguments):
        return self._callback(invoker, label, arguments)

    def on_suggest(self, invoker, label, arguments):
        if self._completer is Unset:
            return None
        return self._completer(invoker, label, arguments)


def command(
        source=Unset,
        /,
        *,
        name=Unset,
        invoker_class=InvokerClass.ANY,
        description=Unset,
        aliases=(),
        permission=Unset,
        arguments="",
):
    """
    Create a function-backed Command or return a decorator to build it later.

    Invocation modes
    - Direct:     cmd = command(func, name="x")
    - Decorator:  @command(permission="x.use")
                  def func(invoker, label, arguments): ...
    - Bare:       @command
                  def func(invoker, label, arguments): ...

    Defaults
    - name: the function's __name__.
    - description: the function's docstring (cleaned), or "".

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source) or isinstance(source, Command):
            raise TypeError("@command() must be applied to a callable")
        signature = Signature(
            coalesce(name, getattr(source, "__name__", Unset)),
            invoker_class,
            coalesce(description, inspect.getdoc(source) or ""),
            aliases=aliases,
            permission=permission,
            arguments=arguments,
        )
        return FunctionCommand(source, signature)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "Command",
    "FunctionCommand",
    "command",
    "check_conflicts",
    "signature_of",
)
