"""
Help rendering: turns a command tree into paginated or per-command help lines.

Entries
- collect() walks one command and its permitted descendants, yielding one entry per
  listed node. A node is listed when it has a description or has no children, so
  intermediate “category” commands without a description do not produce empty lines.
- page() flattens the entries of every permitted top-level command (registration order)
  and slices one page out of them, below the header.
- focused() renders the header, a property summary of one command, then the entries of
  that command and its permitted descendants.

Every line is rich console markup: templates come from Settings verbatim and all
command-provided text is escaped, so a hint such as "[player]" is shown literally.
"""
import itertools
import sys

from rich.markup import escape

from .settings import PAGE_PLACEHOLDER
from .signatures import permitted
from .utils import IntrospectiveType


class HelpRenderer(metaclass=IntrospectiveType):
    __introspectable__ = ("settings",)

    def __init__(self, settings, /):
        self._settings = settings

    def header(self, page, /):
        return self._settings.header.replace(PAGE_PLACEHOLDER, str(page))

    def entry(self, route, signature, /):
        """
        Format one help entry for the command reached through route ("label a b").
        """
        settings = self._settings
        line = settings.command_prefix + escape(route)
        if signature.arguments:
            line += settings.argument_spacer + escape(signature.arguments)
        return line + settings.description_spacer + escape(signature.description)

    def collect(self, invoker, command, prefix, /):
        """
        Lazily yield the entries of command and its permitted descendants.

        The route of each entry is prefix followed by the names from command downwards;
        children are visited in registration order.
        """
        route = f"{prefix} {command.name}" if prefix else command.name
        if command.signature.description or not command.children:
            yield self.entry(route, command.signature)
        for child in command.children:
            if permitted(invoker, child.signature):
                yield from self.collect(invoker, child, route)

    def page(self, invoker, commands, label, page=0, /):
        """
        Return the header followed by the entries of the requested zero-based page.

        Negative pages are clamped to 0; a page past the end yields the header alone,
        including pages too large to slice.
        """
        page = max(page, 0)
        size = self._settings.page_size
        start = page * size
        if start >= sys.maxsize:
            return [self.header(page)]
        entries = itertools.chain.from_iterable(
            self.collect(invoker, command, label) for command in commands if permitted(invoker, command.signature)
        )
        return [self.header(page), *itertools.islice(entries, start, min(start + size, sys.maxsize))]

    def focused(self, invoker, command, label, /):
        """
        Return the header, the property summary of command, then its entries.
        """
        settings = self._settings
        signature = command.signature

        def property(name, value):
            return settings.property_prefix + name + settings.property_spacer + escape(value)

        return [
            self.header(0),
            property("Name", signature.name),
            property("Aliases", "[%s]" % ", ".join(signature.aliases)),
            property("Type", signature.invoker_class.name),
            property("Permission", signature.permission),
            property("Description", signature.description),
            *self.collect(invoker, command, label),
        ]


__all__ = (
    "HelpRenderer",
)
