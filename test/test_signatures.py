"""
Signature and access-check tests (validation, immutability, case-insensitive keys).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from commandeer import InvokerClass, InvokerKind, Signature, permitted

from doubles import RecordingInvoker


class TestSignature(TestCase):
    """Construction, normalization and matching of signatures."""

    def testValuesAreStrippedAndKept(self):
        signature = Signature(
            " kick ",
            InvokerClass.CLASS_A,
            " Kick a player. ",
            aliases=["k", "Boot"],
            permission=" mod.kick ",
            arguments=" <player> ",
        )
        self.assertEqual(signature.name, "kick")
        self.assertEqual(signature.aliases, ("k", "Boot"))
        self.assertIs(signature.invoker_class, InvokerClass.CLASS_A)
        self.assertEqual(signature.permission, "mod.kick")
        self.assertEqual(signature.arguments, "<player>")
        self.assertEqual(signature.description, "Kick a player.")

    def testDefaults(self):
        signature = Signature("list")
        self.assertIs(signature.invoker_class, InvokerClass.ANY)
        self.assertEqual(signature.aliases, ())
        self.assertEqual(signature.permission, "")
        self.assertEqual(signature.arguments, "")
        self.assertEqual(signature.description, "")

    def testNonePermissionMeansUnrestricted(self):
        self.assertEqual(Signature("list", permission=None).permission, "")

    def testMatchingIsCaseInsensitive(self):
        signature = Signature("Kick", aliases=("BOOT",))
        self.assertEqual(signature.keys, frozenset({"kick", "boot"}))
        for token in ("kick", "KICK", "Kick", "boot", "Boot"):
            self.assertTrue(signature.matches(token), token)
        self.assertFalse(signature.matches("kic"))
        self.assertFalse(signature.matches(None))

    def testEmptyNameRaises(self):
        with self.assertRaises(ValueError):
            Signature("   ")

    def testWhitespaceInNameRaises(self):
        with self.assertRaises(ValueError):
            Signature("two words")

    def testNonStringNameRaises(self):
        with self.assertRaises(TypeError):
            Signature(42)

    def testStringAliasesRaises(self):
        # a bare string would otherwise be split into one alias per character
        with self.assertRaises(TypeError):
            Signature("kick", aliases="k")

    def testAliasRepeatingNameRaises(self):
        with self.assertRaises(ValueError):
            Signature("kick", aliases=("KICK",))

    def testDuplicatedAliasRaises(self):
        with self.assertRaises(ValueError):
            Signature("kick", aliases=("k", "K"))

    def testWrongInvokerClassRaises(self):
        with self.assertRaises(TypeError):
            Signature("kick", "ANY")

    def testNonStringDescriptionRaises(self):
        with self.assertRaises(TypeError):
            Signature("kick", description=None)

    def testSignatureIsImmutable(self):
        signature = Signature("kick")
        with self.assertRaises(AttributeError):
            signature.name = "ban"
        with self.assertRaises(AttributeError):
            signature._name = "ban"
        with self.assertRaises(AttributeError):
            del signature._name
        self.assertEqual(signature.name, "kick")

    def testReprNamesTheFields(self):
        self.assertIn("name='kick'", repr(Signature("kick")))


class TestAccessCheck(TestCase):
    """Invoker-class compatibility combined with the permission lookup."""

    def testInvokerClassAdmits(self):
        table = {
            InvokerClass.ANY: {InvokerKind.CLASS_A, InvokerKind.CLASS_B, InvokerKind.OTHER},
            InvokerClass.SUB_COMMAND: {InvokerKind.CLASS_A, InvokerKind.CLASS_B, InvokerKind.OTHER},
            InvokerClass.CLASS_A: {InvokerKind.CLASS_A},
            InvokerClass.CLASS_B: {InvokerKind.CLASS_B},
            InvokerClass.CLASS_A_OR_B: {InvokerKind.CLASS_A, InvokerKind.CLASS_B},
        }
        for invoker_class, admitted in table.items():
            for kind in InvokerKind:
                self.assertEqual(invoker_class.admits(kind), kind in admitted, (invoker_class, kind))

    def testEmptyPermissionAlwaysPasses(self):
        self.assertTrue(permitted(RecordingInvoker(), Signature("list")))

    def testPermissionMustBeHeld(self):
        signature = Signature("stop", permission="server.stop")
        self.assertFalse(permitted(RecordingInvoker(), signature))
        self.assertTrue(permitted(RecordingInvoker("server.stop"), signature))

    def testBothChecksMustPass(self):
        signature = Signature("stop", InvokerClass.CLASS_A, permission="server.stop")
        self.assertFalse(permitted(RecordingInvoker("server.stop", kind=InvokerKind.CLASS_B), signature))
        self.assertFalse(permitted(RecordingInvoker(kind=InvokerKind.CLASS_A), signature))
        self.assertTrue(permitted(RecordingInvoker("server.stop", kind=InvokerKind.CLASS_A), signature))


if __name__ == "__main__":
    unittest.main()
