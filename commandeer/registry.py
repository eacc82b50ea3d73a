"""
Commandeer registry: validate and assemble a top-level command set into a Dispatcher.

Usage
    registry = Registry(help=True, completions=True, page_size=10)
    registry.add(reload_command)

    @registry.command(permission="server.stop")
    def stop(invoker, label, arguments):
        "Stop the server."

    dispatcher = registry.build()

Rules
- Options must be configured before the first command is added; afterwards every
  configure() call raises SealedConfigurationError.
- Top-level commands cannot be SUB_COMMAND commands, and their names/aliases must not
  collide with each other (nor with "help" when help is enabled).
- build() seals every registered tree and returns a Dispatcher bound to a frozen
  Settings snapshot. It can be called again; each call yields an equivalent dispatcher.
"""
import logging

from .commands import check_conflicts, command, signature_of
from .dispatcher import HELP, Dispatcher
from .faults import *
from .settings import DEFAULTS, Settings, process_option
from .signatures import InvokerClass
from .utils import *

logger = logging.getLogger(__name__)


class Registry(metaclass=IntrospectiveType):
    """
    Builder of a Dispatcher.

    Options (keyword-only, see commandeer.settings)
    - help, completions, run_last_allowed: bool
    - page_size: int in 0..100
    - header, command_prefix, argument_spacer, description_spacer,
      property_prefix, property_spacer: str (rich markup)
    """
    __introspectable__ = (
        "commands",
        "options",
    )

    def __init__(self, **options):
        self._commands = []
        self._options = dict(DEFAULTS)
        self.configure(**options)

    @classmethod
    def of(cls, dispatcher, /):
        """
        Re-open a built dispatcher: a registry with its options and commands, ready to
        receive more top-level commands and build a new dispatcher.
        """
        if not isinstance(dispatcher, Dispatcher):
            raise TypeError(f"{cls.__typename__}.of() argument must be a dispatcher")
        registry = cls(**dispatcher.settings.asdict())
        registry._commands.extend(dispatcher.commands)
        return registry

    def configure(self, **options):
        """
        Update options; every value is validated before any is applied.

        Raises
        - SealedConfigurationError: a command was already added.
        - TypeError: unknown option or wrongly typed value.
        - PageSizeError: page_size outside 0..100.
        """
        if self._commands:
            raise SealedConfigurationError(
                "options cannot be modified after commands have been added",
                title="sealed configuration",
                code=FaultCode.SEALED_CONFIGURATION,
                hint="configure the registry before adding the first command",
            )
        self._options.update({name: process_option(type(self), name, value) for name, value in options.items()})
        return self

    def add(self, command, /):
        """
        Register a top-level command (appended; registration order is help order).

        Raises
        - MissingSignatureError, CommandTypeError (SUB_COMMAND at top level),
          DuplicatedNameError, AliasConflictError, ReservedNameError ("help" while
          help is enabled).

        Returns
        - self, so registrations can be chained.
        """
        signature = signature_of(command, "command")
        if signature.invoker_class is InvokerClass.SUB_COMMAND:
            raise CommandTypeError(
                "cannot register %r: command type must not be %s" % (signature.name, InvokerClass.SUB_COMMAND.name),
                title="wrong command type",
                code=FaultCode.WRONG_COMMAND_TYPE,
                hint="attach SUB_COMMAND commands to a parent command instead",
                name=signature.name,
            )
        check_conflicts(
            self._commands,
            command,
            scope="command",
            reserved=(HELP,) if self._options["help"] else (),
        )
        self._commands.append(command)
        logger.debug("registered command %r", signature.name)
        return self

    def command(self, source=Unset, /, **options):
        """
        Create a function-backed command (see commandeer.command) and register it.

        Returns the command (or a decorator returning it).
        """
        @rename("command")
        def wrapper(source, /):
            self.add(child := command(source, **options))
            return child

        return wrapper(source) if source is not Unset else wrapper

    def build(self, /, factory=Dispatcher):
        """
        Seal the registered trees and return factory(commands, settings).

        Parameters
        - factory: Dispatcher subclass, typically one overriding the hooks.
        """
        if not isinstance(factory, type) or not issubclass(factory, Dispatcher):
            raise TypeError(f"{type(self).__typename__}.build() 'factory' must be a dispatcher type")
        settings = Settings(**self._options)
        for registered in self._commands:
            registered.seal()
        logger.debug("built %s with %d commands", factory.__typename__, len(self._commands))
        return factory(self._commands, settings)


__all__ = (
    "Registry",
)
