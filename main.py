import logging
import sys

from rich.pretty import pprint

from commandeer import *

registry = Registry(help=True, completions=True, page_size=5)


@registry.command(aliases=("i",), arguments="<item> [amount]")
def inventory(invoker, label, arguments):
    """
    Show or edit the inventory.
    """
    invoker.send_text("inventory: %s" % (" ".join(arguments) or "empty"))


@inventory.command(permission="inventory.clear")
def clear(invoker, label, arguments):
    """
    Empty the inventory.
    """
    invoker.send_text("inventory cleared")


@inventory.completer
def items(invoker, label, arguments):
    return ["apple", "bread", "torch"]


@registry.command(invoker_class=InvokerClass.CLASS_A, permission="server.stop")
def stop(invoker, label, arguments):
    """
    Stop the server.
    """
    invoker.send_text("stopping")


dispatcher = registry.build()


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    invoker = ConsoleInvoker(["inventory.use"])
    if sys.argv[1:2] == ["--complete"]:
        pprint(dispatcher.complete(invoker, "main.py", sys.argv[2:]))
    else:
        invoke(dispatcher, invoker, label="main.py")
