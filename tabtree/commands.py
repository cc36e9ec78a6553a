"""
Tabtree command layer: build command trees and run them.

What this module provides
- Command: a tree node with a name, options, switches, subcommands, a provider
  of legal positional arguments and an optional execution callback.
  • Hierarchies (parent/child) model subcommands (``git remote add``).
  • The same tree drives both dispatch (tabtree.dispatcher) and tab completion
    (tabtree.completion).
  • Faults are surfaced through Command.trigger, raised or rendered with rich
    depending on the node's runtime flags.

- Factories and helpers:
  • command(...): create a Command or a decorator that produces one.
  • group(name, ...): create a callback-less command that only routes.
  • invoke(obj, prompt): process entry point (dispatch or completion).

Quick start
    from tabtree import group, Option, Switch, invoke

    tool = group("tool", shell=True)

    @tool.command(options=[Option("shell", "s", values=("bash", "sh"))], arguments=["web", "db"])
    def enter(options, switches, args):
        print(options.get("shell", "bash"), args)

    if __name__ == "__main__":
        invoke(tool)

Process arguments
- ``--autocomplete-help <0|1> <word>...``: print completion hints, one per line.
- ``--generate-autocomplete-file``: print the bash integration script.
- anything else: dispatch to the terminal command.

See also
- tabtree.specs for Option/Switch.
- tabtree.faults for fault codes and rendering behavior.
"""
import copy
import difflib
import functools
import operator
import os.path
import re
import shlex
import sys
from collections.abc import Iterable

from rich.text import Text

from .completion import complete
from .dispatcher import dispatch
from .faults import *
from .integration import script
from .specs import Option, Switch
from .utils import *
from .validation import validate

AUTOCOMPLETE_HELP = "--autocomplete-help"
GENERATE_AUTOCOMPLETE_FILE = "--generate-autocomplete-file"


class CommandType(type):
    """
    Metaclass providing introspection plumbing for Command.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ narrows which properties are shown by __rich_repr__
      (the parent is left out so representations never loop).
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_name(cls, name):
    """
    Validate a command name: a non-empty word that cannot be mistaken for a flag.
    """
    if not isinstance(name, str | Text):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    if not (name := str(name).strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    if name.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'name' {name!r} cannot start with a hyphen")
    if re.search(r"\s", name):
        raise ValueError(f"{cls.__typename__} 'name' {name!r} cannot contain whitespaces")
    return name


def _sanitize_specs(cls, specs, spec, kind):
    """
    Materialize options/switches into a tuple, checking the element type.
    """
    if not isinstance(specs, Iterable):
        raise TypeError(f"{cls.__typename__} '{kind}' must be an iterable of {spec.__typename__}s")
    specs = tuple(specs)
    for item in specs:
        if not isinstance(item, spec):
            raise TypeError(f"{cls.__typename__} '{kind}' must be an iterable of {spec.__typename__}s")
    return specs


def _sanitize_arguments(cls, arguments):
    """
    Positional possibilities: Unset, a zero-argument callable, or an iterable of strings.
    """
    if arguments is Unset or callable(arguments):
        return arguments
    if isinstance(arguments, str) or not isinstance(arguments, Iterable):
        raise TypeError(f"{cls.__typename__} 'arguments' must be callable or an iterable of strings")
    arguments = tuple(arguments)
    if not all(isinstance(argument, str) for argument in arguments):
        raise TypeError(f"{cls.__typename__} 'arguments' must be callable or an iterable of strings")
    return arguments


def _attach_to_parent(self, parent):
    """
    Register this command under its parent.

    Name uniqueness among siblings is checked by validate(), which runs on the
    whole tree before it accepts input.
    """
    if parent:
        parent._children.append(self)


class Command(metaclass=CommandType):
    """
    Tree node describing one command of a command-line program.

    Responsibilities
    - Introspection: exposes metadata (name, options, switches, children, …) as
      read-only properties; containers come back as fresh copies.
    - Composition: children are attached at construction through 'parent'
      (or the command() method), and a node is never re-parented.
    - Lookups used by the dispatcher and the completion engine, triggering
      position-first faults for unknown option/switch names.
    - Invocation: the callback receives (options, switches, args) when the
      node is the terminal command of a dispatch.

    Invariant (checked by tabtree.validation.validate)
    - a node with children owns neither options nor switches.
    """

    __introspectable__ = (
        "name",
        "descr",
        "options",
        "switches",
        "arguments",
        "parent",
        "children",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "descr",
        "options",
        "switches",
        "arguments",
        "children",
    )

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    @property
    def executable(self):
        """
        Whether this command has a callback to run when it is the terminal node.
        """
        return self._callback is not Unset

    def __init__(
            self,
            source=Unset,
            /,
            parent=Unset,
            name=Unset,
            descr=Unset,
            options=(),
            switches=(),
            arguments=Unset,
            *,
            shell=Unset,
            fancy=Unset,
            colorful=Unset
    ):
        """
        Construct a command node.

        Parameters
        - source: Callable | Unset
          Execution callback, called as source(options, switches, args).
          Unset builds a pure routing group.
        - parent: Command | Unset
          Parent under which to attach this command. If Unset, remains top-level.
        - name: str | Unset
          Word matched against typed tokens. Defaults to the callback's __name__,
          or to the program's basename for groups.
        - descr: str | Text | Unset
          Short description (defaults to the callback's docstring).
        - options: Iterable[Option]
        - switches: Iterable[Switch]
        - arguments: Iterable[str] | Callable[[], Iterable[str]] | Unset
          Legal positional arguments offered to completion (e.g., running
          container names); a callable is queried on every request.
        - shell, fancy, colorful: bool | Unset
          Runtime flags for fault rendering. If Unset, inherited from the parent
          (or False).

        Raises
        - TypeError/ValueError on invalid parent, name, options, switches or arguments.
        """
        cls = type(self)
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{cls.__typename__} 'parent' must be a command")
        if source is not Unset and not callable(source):
            raise TypeError(f"{cls.__typename__} 'source' must be callable")

        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        elif isinstance(descr, str) and not (descr := descr.strip()):
            raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")

        metadata = {
            "name": _sanitize_name(cls, coalesce(name, getattr(source, "__name__", os.path.basename(sys.argv[0])))),
            "descr": coalesce(descr, ((source.__doc__ if source else None) or "").strip() or None),
            "options": _sanitize_specs(cls, options, Option, "options"),
            "switches": _sanitize_specs(cls, switches, Switch, "switches"),
            "arguments": _sanitize_arguments(cls, arguments),
            # Runtime flags (inherit from parent when Unset)
            "shell": bool(coalesce(shell, getattr(parent, "shell", False))),
            "fancy": bool(coalesce(fancy, getattr(parent, "fancy", False))),
            "colorful": bool(coalesce(colorful, getattr(parent, "colorful", False))),
            # Parent/children wiring
            "parent": coalesce(parent),
            "children": [],
        }

        self._callback = source
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

        _attach_to_parent(self, self.parent)

    def __call__(self, options, switches, args, /):
        """
        Forward a parsed invocation to the callback.
        """
        if self._callback is Unset:
            raise TypeError(f"{type(self).__typename__} {self.name!r} has no callback")
        return self._callback(options, switches, args)

    def possibilities(self):
        """
        Return the legal positional arguments offered to completion.

        Static sequences are returned as a list copy; providers are called on
        every request (no caching, no timeout).
        """
        if self._arguments is Unset:
            return []
        if callable(self._arguments):
            arguments = self._arguments()
            if isinstance(arguments, str) or not isinstance(arguments, Iterable):
                raise TypeError(f"{type(self).__typename__} {self.name!r} arguments provider must return strings")
            arguments = list(arguments)
            if not all(isinstance(argument, str) for argument in arguments):
                raise TypeError(f"{type(self).__typename__} {self.name!r} arguments provider must return strings")
            return arguments
        return list(self._arguments)

    def provide(self, provider, /):
        """
        Register the positional arguments provider (decorator-friendly).

        Rules
        - Must be callable and take no arguments.
        - Can be set only once (and not when 'arguments' was given).

        Returns
        - The same callable, enabling decorator-style usage: @cmd.provide
        """
        if not callable(provider):
            raise TypeError(f"{type(self).__typename__} provider must be callable")
        if self._arguments is not Unset:
            raise TypeError(f"{type(self).__typename__} arguments cannot be overridden")
        self._arguments = provider
        return provider

    def command(self, source=Unset, /, *args, **kwargs):
        """
        Create a subcommand under this command.

        Thin wrapper around the top-level command(...) factory that injects
        this command as the parent. Supports direct and decorator modes:
        - self.command(callback, ...) -> Command
        - @self.command / @self.command(...)
        """
        return command(source, self, *args, **kwargs)

    def group(self, name, /, *args, **kwargs):
        """
        Create a callback-less subcommand group under this command.
        """
        return Command(Unset, self, name, *args, **kwargs)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this command's runtime flags merged in.

        Non-shell commands raise exceptions (and warn for warnings); shell
        commands render them on stderr and exit with status 1 for exceptions.
        """
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(fault, **options, tool=self, shell=self.shell, fancy=self.fancy, colorful=self.colorful)
        trigger(fault)

    def _child(self, name):
        """
        Return the child named 'name', or None when there is none.
        """
        for child in self._children:
            if child.name == name:
                return child
        return None

    def _resolve_option(self, token, /, *, index):
        r"""
        Find the option spelled by 'token' (hyphens optional, long or short name).

        On miss, triggers UnknownOptionError with close-match suggestions; when
        the name belongs to a switch, the hint explains that switches take no value.
        """
        input = token.lstrip("-")
        for option in self._options:
            if input in (option.longhand, option.shorthand):
                return option

        route = " ".join(step.name for step in self.path)
        names = [name for option in self._options for name in option.names]
        suggestions = difflib.get_close_matches(token, names, 5)

        if any(input in (switch.longhand, switch.shorthand) for switch in self._switches):
            hint = "%r is a switch and takes no value; remove everything from '='" % token
        else:
            try:
                hint = "did you mean %r? options of '%s' are: %s" % (suggestions[0], route, ", ".join(names))
            except IndexError:
                hint = "options of '%s' are: %s" % (route, ", ".join(names)) if names else "'%s' takes no options" % route

        self.trigger(UnknownOptionError(
            "unknown option %r at %s position" % (token, ordinal(index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            input=input,
            index=index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        ))
        raise RuntimeError("unreachable")

    def _resolve_switch(self, token, /, *, index):
        """
        Find the switch spelled by 'token' (hyphens optional, long or short name).

        On miss, triggers UnknownSwitchError with close-match suggestions; when
        the name belongs to an option, the hint shows the '=value' form.
        """
        input = token.lstrip("-")
        for switch in self._switches:
            if input in (switch.longhand, switch.shorthand):
                return switch

        route = " ".join(step.name for step in self.path)
        names = [name for switch in self._switches for name in switch.names]
        suggestions = difflib.get_close_matches(token, names, 5)

        if any(input in (option.longhand, option.shorthand) for option in self._options):
            hint = "%r is an option; give it a value (for example: %s=<value>)" % (token, token)
        else:
            try:
                hint = "did you mean %r? switches of '%s' are: %s" % (suggestions[0], route, ", ".join(names))
            except IndexError:
                hint = "switches of '%s' are: %s" % (route, ", ".join(names)) if names else "'%s' takes no switches" % route

        self.trigger(UnknownSwitchError(
            "unknown switch %r at %s position" % (token, ordinal(index)),
            title="unknown switch",
            code=FaultCode.UNKNOWN_SWITCH,
            input=input,
            index=index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_SWITCH),
        ))
        raise RuntimeError("unreachable")

    def __invoke__(self, prompt=Unset):
        """
        Run this command tree as a program.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence.

        Behavior
        - Validates the tree (tabtree.validation.validate) before reading input.
        - ``--autocomplete-help <0|1> <word>...``: prints the completion hints,
          one per line; prints nothing when there are none.
        - ``--generate-autocomplete-file``: prints the bash integration script.
        - Otherwise the tokens are dispatched and the callback result returned.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        validate(self)

        if tokens[:1] == [AUTOCOMPLETE_HELP]:
            hints = complete(self, tokens[2:], tokens[1:2] == ["1"])
            if hints:
                print(*hints, sep="\n")
            return None

        if tokens[:1] == [GENERATE_AUTOCOMPLETE_FILE]:
            print(script(self, sentinel=AUTOCOMPLETE_HELP), end="")
            return None

        return dispatch(self, tokens)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct callback:
        cmd = command(func, ..., name="x", ...)
    - Decorator:
        @command
        def func(options, switches, args): ...
        @command(name="x", ...)
        def func(options, switches, args): ...

    Parameters
    - source: Unset | Callable
    - *args, **kwargs: forwarded to Command(...) (parent, name, descr, options,
      switches, arguments, runtime flags).
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source) or isinstance(source, Command):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def group(name=Unset, /, *args, **kwargs):
    """
    Create a callback-less command that only routes to its subcommands.

    Reaching a group as the terminal command reports an unknown subcommand
    (when a positional was typed) or a missing subcommand.
    """
    return Command(Unset, *args, name=name, **kwargs)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for commands or callables.

    Parameters
    - object: an instance providing __invoke__(prompt) or a plain callable
      (wrapped with command() first).
    - prompt: Unset (sys.argv[1:]), a shell-like string or an iterable of strings.

    Returns
    - the terminal callback's result on dispatch, None for completion modes.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if callable(object):
        return invoke(command(object), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "AUTOCOMPLETE_HELP",
    "GENERATE_AUTOCOMPLETE_FILE",
    "Command",
    "command",
    "group",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
