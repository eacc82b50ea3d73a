"""
Commandeer faults (configuration errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every registration-time mistake.
  Codes are grouped by domain to keep copy consistent and make logs/searches predictable.
- ConfigurationError: base type that carries message + options and knows how to render
  itself in a friendly, lowercased, and actionable way through rich.

Only programming mistakes live here. Runtime outcomes of a dispatch (unknown command,
wrong invoker type, missing permission) are expected user input and never raise; they
are routed through the dispatcher hooks instead.

Integration
- Registration code raises the matching subclass with title/code/hint options.
- Hosts that catch a ConfigurationError can print it with a rich console:
      Console(stderr=True).print(error)
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes used across the framework (stable identifiers).

    grouping (by high-level domain)
    - wiring (2110x)
      • MISSING_SIGNATURE, WRONG_COMMAND_TYPE, ATTACHED_COMMAND, SEALED_COMMAND
    - naming (2111x)
      • DUPLICATED_NAME, ALIAS_NAME_CONFLICT, ALIAS_ALIAS_CONFLICT,
        NAME_ALIAS_CONFLICT, RESERVED_NAME
    - settings (2112x)
      • SEALED_CONFIGURATION, PAGE_SIZE_RANGE
    """
    # --- wiring errors (2110x) ---
    MISSING_SIGNATURE           = 21101
    WRONG_COMMAND_TYPE          = 21102
    ATTACHED_COMMAND            = 21103
    SEALED_COMMAND              = 21104

    # --- naming errors (2111x) ---
    DUPLICATED_NAME             = 21111
    ALIAS_NAME_CONFLICT         = 21112
    ALIAS_ALIAS_CONFLICT        = 21113
    NAME_ALIAS_CONFLICT         = 21114
    RESERVED_NAME               = 21115

    # --- settings errors (2112x) ---
    SEALED_CONFIGURATION        = 21121
    PAGE_SIZE_RANGE             = 21122

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ConfigurationError(Exception):
    """
    A registration-time mistake: the command tree or the registry settings are invalid.

    Options (read-only mapping)
    - code: FaultCode
    - title: short lowercase headline
    - hint: one actionable sentence
    - any context the raiser wants to expose (name, alias, scope, ...)
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        main = __import__("__main__")

        styles = defaultdict(str, {
            # header parts
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), styles[style])

        code = self.options.get("code")
        header = Text.assemble(
            "[ ",
            text(code.normalize() if code else "", "code"),
            " | ",
            text(str(self.options.get("title", "configuration error")).title(), "error-title"),
            " ]"
        )
        message = text(self.message, "error-message")
        hint = Text.assemble(text(" → ", "hint-arrow"), text(self.options.get("hint"), "hint"))

        return Group(header, message, hint)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingSignatureError(ConfigurationError): ...
class CommandTypeError(ConfigurationError): ...
class AttachedCommandError(ConfigurationError): ...
class SealedCommandError(ConfigurationError): ...
class DuplicatedNameError(ConfigurationError): ...
class AliasConflictError(ConfigurationError): ...
class ReservedNameError(ConfigurationError): ...
class SealedConfigurationError(ConfigurationError): ...
class PageSizeError(ConfigurationError): ...


__all__ = (
    "FaultCode",
    "ConfigurationError",
    "MissingSignatureError",
    "CommandTypeError",
    "AttachedCommandError",
    "SealedCommandError",
    "DuplicatedNameError",
    "AliasConflictError",
    "ReservedNameError",
    "SealedConfigurationError",
    "PageSizeError",
)
