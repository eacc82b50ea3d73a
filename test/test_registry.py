"""
Registry tests (configuration, top-level validation, build and re-open).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from commandeer import Dispatcher, FunctionCommand, InvokerClass, Registry, Settings
from commandeer.faults import (
    AliasConflictError,
    CommandTypeError,
    DuplicatedNameError,
    FaultCode,
    PageSizeError,
    ReservedNameError,
    SealedCommandError,
    SealedConfigurationError,
)

from doubles import RecordingCommand, RecordingDispatcher, RecordingInvoker


class TestConfiguration(TestCase):
    """Options are validated, and fixed once commands exist."""

    def testDefaults(self):
        settings = Registry().build().settings
        self.assertFalse(settings.help)
        self.assertFalse(settings.completions)
        self.assertFalse(settings.run_last_allowed)
        self.assertEqual(settings.page_size, 5)
        self.assertIn("%page%", settings.header)

    def testConfigureBeforeAdd(self):
        registry = Registry(help=True).configure(page_size=0, completions=True)
        settings = registry.build().settings
        self.assertTrue(settings.help)
        self.assertTrue(settings.completions)
        self.assertEqual(settings.page_size, 0)

    def testConfigureAfterAddRaises(self):
        registry = Registry().add(RecordingCommand("list"))
        with self.assertRaises(SealedConfigurationError) as context:
            registry.configure(help=True)
        self.assertEqual(context.exception.code, FaultCode.SEALED_CONFIGURATION)
        self.assertFalse(registry.options["help"])

    def testPageSizeBounds(self):
        Registry(page_size=0)
        Registry(page_size=100)
        for value in (-1, 101):
            with self.assertRaises(PageSizeError) as context:
                Registry(page_size=value)
            self.assertEqual(context.exception.code, FaultCode.PAGE_SIZE_RANGE)

    def testWronglyTypedOptionsRaise(self):
        for options in ({"page_size": True}, {"page_size": "5"}, {"help": 1}, {"header": None}):
            with self.assertRaises(TypeError, msg=options):
                Registry(**options)

    def testUnknownOptionRaises(self):
        with self.assertRaises(TypeError):
            Registry(use_help=True)

    def testFailedConfigureAppliesNothing(self):
        registry = Registry()
        with self.assertRaises(PageSizeError):
            registry.configure(help=True, page_size=500)
        self.assertFalse(registry.options["help"])

    def testSettingsAreImmutable(self):
        settings = Settings(help=True)
        with self.assertRaises(AttributeError):
            settings.help = False
        with self.assertRaises(AttributeError):
            settings._help = False
        self.assertTrue(settings.help)


class TestRegistration(TestCase):
    """Top-level validation performed by Registry.add()."""

    def testAddKeepsInsertionOrder(self):
        registry = Registry()
        for name in ("zeta", "alpha", "mid"):
            self.assertIs(registry.add(RecordingCommand(name)), registry)
        self.assertEqual([command.name for command in registry.commands], ["zeta", "alpha", "mid"])

    def testSubCommandAtTopLevelRaises(self):
        with self.assertRaises(CommandTypeError) as context:
            Registry().add(RecordingCommand("child", InvokerClass.SUB_COMMAND))
        self.assertEqual(context.exception.code, FaultCode.WRONG_COMMAND_TYPE)

    def testConflictsLeaveRegistryUnchanged(self):
        registry = Registry().add(RecordingCommand("list", aliases=("ls",)))
        with self.assertRaises(DuplicatedNameError):
            registry.add(RecordingCommand("LIST"))
        with self.assertRaises(AliasConflictError):
            registry.add(RecordingCommand("show", aliases=("LS",)))
        with self.assertRaises(AliasConflictError):
            registry.add(RecordingCommand("Ls"))
        self.assertEqual(len(registry.commands), 1)

    def testHelpIsReservedWhenEnabled(self):
        registry = Registry(help=True)
        with self.assertRaises(ReservedNameError):
            registry.add(RecordingCommand("Help"))
        with self.assertRaises(ReservedNameError):
            registry.add(RecordingCommand("assist", aliases=("HELP",)))
        self.assertEqual(registry.commands, [])

    def testHelpIsFreeWhenDisabled(self):
        registry = Registry().add(RecordingCommand("help"))
        self.assertEqual(len(registry.commands), 1)

    def testCommandDecoratorRegisters(self):
        registry = Registry()

        @registry.command(permission="server.stop")
        def stop(invoker, label, arguments):
            """Stop the server."""

        self.assertIsInstance(stop, FunctionCommand)
        self.assertEqual(registry.commands, [stop])
        self.assertEqual(stop.signature.description, "Stop the server.")

    def testRegistrationIsLogged(self):
        with self.assertLogs("commandeer.registry", "DEBUG") as logs:
            Registry().add(RecordingCommand("list"))
        self.assertIn("registered command 'list'", logs.output[0])


class TestBuild(TestCase):
    """Registry.build() and Registry.of()."""

    def setUp(self):
        self.root = RecordingCommand("root", aliases=("r",))
        self.child = RecordingCommand("child", InvokerClass.SUB_COMMAND, permission="p")
        self.root.attach(self.child)
        self.registry = Registry(help=True).add(self.root)

    def testBuildReturnsDispatcher(self):
        dispatcher = self.registry.build()
        self.assertIsInstance(dispatcher, Dispatcher)
        self.assertEqual(dispatcher.commands, (self.root,))

    def testBuildUsesFactory(self):
        self.assertIsInstance(self.registry.build(RecordingDispatcher), RecordingDispatcher)

    def testBuildRejectsNonDispatcherFactory(self):
        with self.assertRaises(TypeError):
            self.registry.build(object)

    def testBuildSealsTrees(self):
        self.registry.build()
        self.assertTrue(self.root.sealed)
        with self.assertRaises(SealedCommandError):
            self.child.attach(RecordingCommand("grandchild", InvokerClass.SUB_COMMAND))

    def testBuildIsIdempotent(self):
        first, second = self.registry.build(), self.registry.build()
        invoker = RecordingInvoker("p")
        for tokens in ([], ["r"], ["root", "child", "x"], ["ROOT", "nope"], ["missing"]):
            self.assertEqual(first.resolve(invoker, tokens), second.resolve(invoker, tokens), tokens)

    def testLaterAdditionsDoNotLeakIntoBuiltDispatcher(self):
        dispatcher = self.registry.build()
        self.registry.add(RecordingCommand("other"))
        self.assertIsNone(dispatcher.lookup("other"))

    def testOfReopensDispatcher(self):
        dispatcher = self.registry.build()
        registry = Registry.of(dispatcher)
        self.assertTrue(registry.options["help"])
        registry.add(RecordingCommand("extra"))
        with self.assertRaises(DuplicatedNameError):
            registry.add(RecordingCommand("root"))
        rebuilt = registry.build()
        self.assertEqual([command.name for command in rebuilt.commands], ["root", "extra"])
        self.assertEqual(dispatcher.commands, (self.root,))

    def testOfRequiresDispatcher(self):
        with self.assertRaises(TypeError):
            Registry.of(self.registry)


if __name__ == "__main__":
    unittest.main()
