"""
Dispatcher settings: handler-wide switches and help templates.

Options
- help: enable the reserved "help" pseudo-command (and reserve the token).
- completions: append permitted subcommand names to completion results.
- run_last_allowed: when a subcommand is denied, run its parent with the denied token
  and everything after it as arguments instead of rejecting the invocation.
- page_size: help entries per page (0..100).
- header: first line of every help view; "%page%" is replaced with the page number.
- command_prefix, argument_spacer, description_spacer: layout of a help entry
      <command_prefix><label> <names...>[<argument_spacer><arguments>]<description_spacer><description>
- property_prefix, property_spacer: layout of the focused help summary
      <property_prefix><Property><property_spacer><value>

Templates are rich console markup; the text they surround is escaped by the renderer.
"""
from .faults import *
from .utils import IntrospectiveType

PAGE_PLACEHOLDER = "%page%"

DEFAULTS = {
    "help": False,
    "completions": False,
    "run_last_allowed": False,
    "page_size": 5,
    "header": "[bold]----Help---- page: %page%[/bold]",
    "command_prefix": "[#FF55FF]",
    "argument_spacer": " [#AA00AA]",
    "description_spacer": " [#555555]>[/] [#AAAAAA]",
    "property_prefix": "[#AA00AA]",
    "property_spacer": " [#555555]>[/] [#AAAAAA]",
}


def process_option(cls, name, value, /):
    """
    Validate one option value for cls (used for the messages' subject).

    Raises
    - TypeError: unknown option or wrongly typed value.
    - PageSizeError: page_size outside 0..100.
    """
    try:
        default = DEFAULTS[name]
    except KeyError:
        raise TypeError(f"{cls.__typename__} got an unexpected option {name!r}") from None

    match default:
        case bool():
            if not isinstance(value, bool):
                raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")
        case int():
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{cls.__typename__} {name!r} must be an integer")
            if not 0 <= value <= 100:
                raise PageSizeError(
                    "page size %d is out of range" % value,
                    title="page size out of range",
                    code=FaultCode.PAGE_SIZE_RANGE,
                    hint="use a page size between 0 and 100",
                    value=value,
                )
        case str():
            if not isinstance(value, str):
                raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    return value


class Settings(metaclass=IntrospectiveType):
    """
    Immutable snapshot of a registry's options, shared by a dispatcher and its renderer.
    """
    __introspectable__ = tuple(DEFAULTS)

    __displayable__ = (
        "help",
        "completions",
        "run_last_allowed",
        "page_size",
    )

    def __init__(self, **options):
        for name, value in (DEFAULTS | options).items():
            object.__setattr__(self, "_" + name, process_option(type(self), name, value))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__typename__} is immutable")

    def asdict(self):
        return {name: getattr(self, name) for name in DEFAULTS}


__all__ = (
    "PAGE_PLACEHOLDER",
    "DEFAULTS",
    "Settings",
    "process_option",
)
