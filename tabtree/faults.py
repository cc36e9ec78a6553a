"""
Tabtree faults: what goes wrong while routing or completing, and how it is shown.

Contents
- FaultCode: numeric identifiers for each user-facing fault, stable across releases.
- CommandException / CommandWarning: a message plus read-only context options
  (title, code, hint, input, index, suggestions, docs, tool, ...), renderable with rich.
- trigger(): merge context into a fault and surface it.
- getdoc(): per-code documentation supplied by the host program.

Wording
- Messages are lowercase and name the token position first ("at second position"),
  followed by a single hint line.

Surfacing
- Commands call Command.trigger(fault), which fills in tool/shell/fancy/colorful.
- Outside shell mode exceptions are raised and warnings go through warnings.warn.
- In shell mode both are printed on stderr and exceptions exit with status 1.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    fault identifiers, grouped by the stage that detects them.

    - 1110x routing: the typed word does not lead to a runnable command.
    - 1111x names: an option or switch is not declared on the command.
    - 11131 delegated: the command callback failed.
    - 121xx warnings: repeated flags, warnings emitted by the callback.

    the gaps between values are reserved; hosts relabel codes with __codes__.
    """
    # routing
    UNKNOWN_COMMAND             = 11101
    UNKNOWN_SUBCOMMAND          = 11102
    MISSING_SUBCOMMAND          = 11103

    # option/switch names
    UNKNOWN_OPTION              = 11111
    UNKNOWN_SWITCH              = 11112

    # callback failures
    DELEGATED_ERROR             = 11131

    # warnings
    DUPLICATED_ARGUMENT         = 12111
    DELEGATED_WARNING           = 12131

    def normalize(self):
        """
        label shown in fault headers: the host's __codes__[self] when defined
        in __main__, the numeric value otherwise.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, styles, kind):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ prog — code | title ]"
    - body: the message, a hint line, and the host documentation if any.
    - fancy: everything wrapped in a left-titled panel.
    """
    main = __import__("__main__")
    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))
    options = defaultdict(lambda: Unset, fault.options)

    def styler(style):
        return styles[style] if options["colorful"] else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not options["colorful"]:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    tool = options["tool"]
    prog = text(getattr(main, "__prog__", tool.root.name if tool else "tabtree"), styler("prog-name"))
    code = options["code"].normalize() if options["code"] else "?"

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(code, styler("code")),
        " | ",
        text(str(options["title"] or kind).title(), styler(kind + "-title")),
        " ]"
    )
    message = text(fault.message, styler(kind + "-message"))
    renders = [message]
    if options["hint"]:
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(options["hint"], styler("hint"))))
    if options["docs"]:
        renders.append(text(options["docs"], styler("docs")))

    if options["fancy"]:
        return Panel(Group(*renders), title=header, title_align="left")

    return Group(header, *renders)


_ERROR_STYLES = {
    "prog-name": "bold white",
    "code": "bold cyan",
    "error-title": "bold red",
    "error-message": "default",
    "hint-arrow": "green dim",
    "hint": "italic green",
    "docs": "bright_black",
}

_WARNING_STYLES = {
    "prog-name": "bold white",
    "code": "bold yellow",
    "warning-title": "bold magenta",
    "warning-message": "default",
    "hint-arrow": "green dim",
    "hint": "italic green",
    "docs": "bright_black",
}


class CommandException(Exception):
    """
    Base class of the faults that stop an invocation.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, _ERROR_STYLES, "error")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "overrides must be given by keyword"
        return type(self)(self.message, **self.options | overrides)


class UnknownOptionError(CommandException): ...
class UnknownSwitchError(CommandException): ...
class UnknownCommandError(CommandException): ...
class UnknownSubcommandError(CommandException): ...
class MissingSubcommandError(CommandException): ...
class DelegatedCommandError(CommandException): ...


class CommandWarning(ABC, Warning):
    """
    Base class of the faults reported without stopping the invocation.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, _WARNING_STYLES, "warning")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "overrides must be given by keyword"
        return type(self)(self.message, **self.options | overrides)


class DuplicatedArgumentWarning(CommandWarning): ...
class DelegatedCommandWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    Merge context options into a fault, then raise, warn or render it.

    The fault must implement __replace__ (used through copy.replace) and
    __trigger__; both base classes above do. Usual options are tool, shell,
    fancy, colorful, title, code, hint and docs, plus whatever context the
    reporter keeps for callers (input, index, suggestions, exception, ...).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    Look up the documentation line for a fault code in __main__.__docs__.

    Returns None when the host program defines none for this code.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "CommandException",
    "UnknownOptionError",
    "UnknownSwitchError",
    "UnknownCommandError",
    "UnknownSubcommandError",
    "MissingSubcommandError",
    "DelegatedCommandError",
    "CommandWarning",
    "DuplicatedArgumentWarning",
    "DelegatedCommandWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
