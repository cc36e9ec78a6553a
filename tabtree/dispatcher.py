"""
Tabtree dispatcher: resolve a token list against a command tree and run it.

resolve(command, tokens) walks the tokens left to right:
- '-x=value' / '--name=value' → option, stored under its longhand (the value is
  everything after the first '=', so values may contain '=' themselves);
- '-x' / '--name'             → switch, its longhand is recorded as present;
- a bare token naming a subcommand → resolution continues in that subcommand
  with the remaining tokens and fresh accumulators;
- any other bare token        → positional argument.

Unknown option or switch names abort the whole resolution before anything is
executed. execute(command, invocation) then hands the Invocation to the
terminal command's callback; dispatch() chains both.
"""
import difflib
import warnings
from types import MappingProxyType
from typing import NamedTuple
from warnings import catch_warnings

from .faults import *
from .utils import ordinal


class Invocation(NamedTuple):
    """
    Parsed call handed to the terminal command.

    - options: read-only mapping longhand -> raw value.
    - switches: frozenset of the longhands present.
    - args: positional arguments in typed order.
    """
    options: MappingProxyType
    switches: frozenset
    args: tuple


def resolve(command, tokens, /, *, index=1):
    """
    Resolve tokens into (terminal_command, Invocation).

    parameters
    - command: the node the tokens are matched against.
    - tokens: iterable of already split words (program name excluded).
    - index: 1-based position of the first token, used in fault messages.

    faults
    - UnknownOptionError / UnknownSwitchError (triggered through the command,
      raised or rendered depending on its shell flag).
    - DuplicatedArgumentWarning when an option or switch is repeated; the last
      option value wins.
    """
    tokens = list(tokens)
    options = {}
    switches = set()
    args = []

    for offset, token in enumerate(tokens):
        position = index + offset

        if token.startswith("-"):
            if "=" in token:
                # split on the first '=' only, e.g. --env=KEY=VALUE
                name, value = token.split("=", 1)
                argument = command._resolve_option(name, index=position)
                if argument.longhand in options:
                    _duplicated(command, argument, "option", position)
                options[argument.longhand] = value
            else:
                argument = command._resolve_switch(token, index=position)
                if argument.longhand in switches:
                    _duplicated(command, argument, "switch", position)
                switches.add(argument.longhand)
            continue

        child = command._child(token)
        if child is None:
            args.append(token)
            continue

        # subcommand route: the current level stops here
        return resolve(child, tokens[offset + 1:], index=position + 1)

    return command, Invocation(MappingProxyType(options), frozenset(switches), tuple(args))


def _duplicated(command, argument, kind, position):
    command.trigger(DuplicatedArgumentWarning(
        "%s %r at %s position was already provided" % (kind, argument.longhand, ordinal(position)),
        title="duplicated %s" % kind,
        code=FaultCode.DUPLICATED_ARGUMENT,
        input=argument.longhand,
        index=position,
        argument=argument,
        hint="keep a single %s; only the last one is taken into account" % kind,
        docs=getdoc(FaultCode.DUPLICATED_ARGUMENT),
    ))


def _unroutable(command, invocation):
    """
    Report a group (a command without callback) that was reached as terminal.
    """
    route = " ".join(step.name for step in command.path)
    names = [child.name for child in command.children]

    if invocation.args and names:
        input = invocation.args[0]
        suggestions = difflib.get_close_matches(input, names, 5)
        try:
            hint = "did you mean %r? you can also pick one of: %s" % (suggestions[0], ", ".join(names))
        except IndexError:
            hint = "pick one of: %s" % ", ".join(names)

        exception = UnknownSubcommandError if command.parent else UnknownCommandError
        code = FaultCode.UNKNOWN_SUBCOMMAND if command.parent else FaultCode.UNKNOWN_COMMAND
        type = "subcommand" if command.parent else "command"

        command.trigger(exception(
            "unknown %s %r for %r" % (type, input, route),
            title="unknown %s" % type,
            code=code,
            input=input,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(code),
        ))
    else:
        command.trigger(MissingSubcommandError(
            "%r expects a subcommand" % route if names else "%r has nothing to run" % route,
            title="missing subcommand",
            code=FaultCode.MISSING_SUBCOMMAND,
            hint="pick one of: %s" % ", ".join(names) if names else "give this command a callback",
            docs=getdoc(FaultCode.MISSING_SUBCOMMAND),
        ))
    raise RuntimeError("unreachable")


def execute(command, invocation, /):
    """
    Invoke the command's callback with (options, switches, args).

    fault shaping
    - commands without callback (pure groups) report an unknown or missing subcommand.
    - CommandException raised by the callback is re-triggered through the command
      so it is rendered in shell mode.
    - any other exception is wrapped as DelegatedCommandError (the caught exception is kept
      in options["exception"]).
    - warnings emitted by the callback are re-surfaced as DelegatedCommandWarning.

    returns
    - whatever the callback returns.
    """
    if not command.executable:
        _unroutable(command, invocation)

    route = " ".join(step.name for step in command.path)
    try:
        with catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = command(*invocation)
    except CommandException as exception:
        command.trigger(exception)
        raise RuntimeError("unreachable")
    except Exception as exception:
        command.trigger(DelegatedCommandError(
            "%r failed: %s" % (route, exception),
            title="delegated error",
            code=FaultCode.DELEGATED_ERROR,
            hint="check the command arguments and try again",
            docs=getdoc(FaultCode.DELEGATED_ERROR),
            exception=exception,
        ))
        raise RuntimeError("unreachable")

    for warning in map(lambda x: x.message, caught):
        command.trigger(DelegatedCommandWarning(
            "%r reported: %s" % (route, warning),
            title="delegated warning",
            code=FaultCode.DELEGATED_WARNING,
            hint="check additional logs for more details",
            docs=getdoc(FaultCode.DELEGATED_WARNING),
            warning=warning,
        ))

    return result


def dispatch(command, tokens, /):
    """
    Resolve tokens against command and execute the terminal command.
    """
    terminal, invocation = resolve(command, tokens)
    return execute(terminal, invocation)


__all__ = (
    "Invocation",
    "resolve",
    "execute",
    "dispatch",
)
