"""
Commandeer dispatcher: resolve token sequences against a built command tree.

What this module provides
- Dispatcher: the immutable result of Registry.build(). It
  • dispatches an invocation (tokens + invoker) to the deepest permitted command,
  • drives the reserved "help" pseudo-command (pages and per-command views),
  • produces completion candidates for partially typed invocations,
  • routes every rejected input through overridable hooks.
- Resolution: (command, depth, arguments) describing a successful resolution.
- invoke(dispatcher, invoker, prompt): shell-like convenience runner.

Resolution
1. No tokens: on_no_arguments(); help page 0 when it returns True.
2. "help" (when enabled): "help <command>" shows that command's focused help if the
   invoker may access it; otherwise "help <n>" shows page n (0 when absent or not an int).
3. First token: case-insensitive name/alias lookup among top-level commands; unknown
   tokens go to on_no_such_command(), help page 0 when it returns True.
4. Access check on the top-level command (invoker class first, then permission); a
   failure goes to on_no_valid_invoker_type() / on_no_permission(), and the denied
   command's focused help is shown when the hook returns True.
5. Walk down the children one token at a time while a child matches:
   • permitted child: descend and consume the token;
   • denied child, run_last_allowed False: reject the invocation (hook fires once);
   • denied child, run_last_allowed True: stop, the parent runs with the denied token
     and everything after it as arguments.
6. Invoke the target with the tokens that follow the consumed route.

dispatch() always returns True: every invocation is “handled”, even when rejected.
The tree is read-only after build, so a dispatcher can serve concurrent invocations.
"""
import logging
import os.path
import shlex
import sys
from collections.abc import Iterable
from typing import NamedTuple

from .commands import Command
from .helps import HelpRenderer
from .signatures import permitted
from .utils import *

logger = logging.getLogger(__name__)

HELP = "help"


class Resolution(NamedTuple):
    command: Command
    depth: int
    arguments: tuple[str, ...]


def _tokenize(tokens, /):
    if isinstance(tokens, str) or not isinstance(tokens, Iterable):
        raise TypeError("tokens must be an iterable of strings")
    tokens = tuple(tokens)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("tokens must be an iterable of strings")
    return tokens


class Dispatcher(metaclass=IntrospectiveType):
    """
    Dispatches invocations over a sealed command tree.

    Hooks
    - Subclass and override any of on_no_arguments, on_no_such_command,
      on_no_valid_invoker_type, on_no_permission. Each returns whether help is shown.
      Pass the subclass to Registry.build(factory=...).

    Output
    - Help lines are sent one by one through invoker.send_text(line).
    """
    __introspectable__ = (
        "commands",
        "settings",
    )

    def __init__(self, commands, settings, /):
        self._commands = tuple(commands)
        self._settings = settings
        self._renderer = HelpRenderer(settings)

    # ── Hooks ───────────────────────────────────────────────────────────────

    def on_no_arguments(self, invoker):
        """
        Called when the invocation has no tokens. Return True to show help page 0.
        """
        return True

    def on_no_such_command(self, invoker, attempted):
        """
        Called when the first token matches no command. Return True to show help page 0.
        """
        return True

    def on_no_valid_invoker_type(self, invoker, signature):
        """
        Called when a top-level command does not admit the invoker's kind.
        Subcommands are SUB_COMMAND commands, which admit every kind, so this only
        fires for commands registered directly. Return True to show the command's help.
        """
        return True

    def on_no_permission(self, invoker, signature):
        """
        Called when the invoker lacks the permission of the command it tried to reach.
        Return True to show the command's help.
        """
        return True

    # ── Lookup ──────────────────────────────────────────────────────────────

    def lookup(self, token, /):
        """
        Return the top-level command whose name or alias matches token, or None.
        """
        for command in self._commands:
            if command.signature.matches(token):
                return command
        return None

    def allowed(self, invoker, /):
        """
        Return the top-level commands invoker passes the access check for, in order.
        """
        return [command for command in self._commands if permitted(invoker, command.signature)]

    def _descend(self, invoker, command, tokens, /, *, strict):
        """
        Walk from command (matched by tokens[0]) down through tokens[1:].

        Returns
        - (target, depth, None) where depth counts consumed subcommand tokens.
        - (None, depth, denied) when strict and a matching child fails the access check.
        """
        depth = 0
        while depth + 1 < len(tokens):
            child = command.lookup(tokens[depth + 1])
            if child is None:
                break
            if not permitted(invoker, child.signature):
                if strict:
                    return None, depth, child
                break
            command = child
            depth += 1
        return command, depth, None

    def resolve(self, invoker, tokens, /):
        """
        Resolve tokens without side effects.

        Returns
        - Resolution(command, depth, arguments) for the command dispatch() would run.
        - None when nothing would run (no tokens, unknown or denied command, or a denied
          subcommand while run_last_allowed is off).
        """
        tokens = _tokenize(tokens)
        if not tokens:
            return None
        command = self.lookup(tokens[0])
        if command is None or not permitted(invoker, command.signature):
            return None
        target, depth, _ = self._descend(invoker, command, tokens, strict=not self._settings.run_last_allowed)
        if target is None:
            return None
        return Resolution(target, depth, tokens[depth + 1:])

    # ── Dispatch ────────────────────────────────────────────────────────────

    def dispatch(self, invoker, label, tokens, /):
        """
        Run the invocation described by tokens on behalf of invoker.

        Parameters
        - invoker: Invoker
        - label: str, the name the host used to reach this dispatcher (first word of
          every help route).
        - tokens: Iterable[str], the invocation split into tokens.

        Returns
        - True, always.
        """
        tokens = _tokenize(tokens)
        settings = self._settings

        if not tokens:
            if self.on_no_arguments(invoker):
                self.help(invoker, label)
            return True

        if settings.help and tokens[0].casefold() == HELP:
            self._help(invoker, label, tokens[1:])
            return True

        command = self.lookup(tokens[0])
        if command is None:
            logger.debug("no such command %r", tokens[0])
            if self.on_no_such_command(invoker, tokens[0]):
                self.help(invoker, label)
            return True

        if not permitted(invoker, command.signature):
            self._deny(invoker, label, command)
            return True

        target, depth, denied = self._descend(invoker, command, tokens, strict=not settings.run_last_allowed)
        if target is None:
            self._deny(invoker, label, denied)
            return True

        arguments = list(tokens[depth + 1:])
        logger.debug("resolved %r at depth %d with arguments %r", target.name, depth, arguments)
        target.on_invoke(invoker, label, arguments)
        return True

    def _deny(self, invoker, label, command, /):
        signature = command.signature
        if not signature.invoker_class.admits(invoker.kind()):
            logger.debug("invoker kind rejected by %r", signature.name)
            show = self.on_no_valid_invoker_type(invoker, signature)
        else:
            logger.debug("permission %r missing for %r", signature.permission, signature.name)
            show = self.on_no_permission(invoker, signature)
        if show:
            self.help_for(invoker, label, command)

    def _help(self, invoker, label, arguments, /):
        if arguments:
            command = self.lookup(arguments[0])
            if command is not None and permitted(invoker, command.signature):
                self.help_for(invoker, label, command)
                return
        try:
            page = int(arguments[0]) if arguments else 0
        except ValueError:
            page = 0
        self.help(invoker, label, page)

    # ── Help ────────────────────────────────────────────────────────────────

    def help(self, invoker, label, page=0, /):
        """
        Send one page of the help listing (permitted top-level commands) to invoker.
        """
        for line in self._renderer.page(invoker, self._commands, label, page):
            invoker.send_text(line)

    def help_for(self, invoker, label, command, /):
        """
        Send the focused help of command (summary, then its permitted subtree) to invoker.
        """
        for line in self._renderer.focused(invoker, command, label):
            invoker.send_text(line)

    # ── Completion ──────────────────────────────────────────────────────────

    def complete(self, invoker, label, tokens, /):
        """
        Return completion candidates for the last (possibly partial) token.

        Candidates are full names; filtering by the typed prefix is left to the caller.

        Returns
        - list[str] of candidates, or
        - None when the target command has no opinion and nothing was appended.
        """
        tokens = _tokenize(tokens)
        settings = self._settings

        if len(tokens) <= 1:
            completions = [command.name for command in self.allowed(invoker)]
            if settings.help:
                completions.append(HELP)
            return completions

        if settings.help and len(tokens) == 2 and tokens[0].casefold() == HELP:
            return [command.name for command in self.allowed(invoker)]

        command = self.lookup(tokens[0])
        if command is None or not permitted(invoker, command.signature):
            return []

        target, depth, _ = self._descend(invoker, command, tokens, strict=False)
        completions = target.on_suggest(invoker, label, list(tokens))
        if completions is not None:
            completions = list(completions)

        if settings.completions and depth == len(tokens) - 2:
            completions = [
                *(completions or ()),
                *(child.name for child in target.children if permitted(invoker, child.signature)),
            ]
        return completions

    def __invoke__(self, invoker, prompt=Unset, /, label=Unset):
        """
        Dispatch a raw prompt.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.
        - label: defaults to the running program's file name.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        else:
            tokens = _tokenize(prompt)
        return self.dispatch(invoker, coalesce(label, os.path.basename(sys.argv[0])), tokens)


def invoke(object, invoker, prompt=Unset, /, label=Unset):
    """
    Convenience runner: object.__invoke__(invoker, prompt, label=label).

    Raises
    - TypeError: when object does not implement __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(invoker, prompt, label=label)
    raise TypeError("invoke() first argument must implement __invoke__ method")


__all__ = (
    "Dispatcher",
    "Resolution",
    "invoke",
    "HELP",
)
