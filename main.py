from rich.pretty import pprint

from tabtree import *

tool = group("tool", shell=True, colorful=True)


@tool.command(options=[Option("shell", "s", values=("bash", "sh"))], arguments=["c1", "c2"])
def enter(options, switches, args):
    """Open a shell inside a container."""
    pprint({"shell": options.get("shell", "bash"), "containers": args})


@tool.command(name="list", switches=[Switch("all", "a")])
def containers(options, switches, args):
    """List containers."""
    pprint(["c1", "c2"] if "all" in switches else ["c1"])


if __name__ == '__main__':
    invoke(tool)
