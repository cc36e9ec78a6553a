r"""
Tabtree flag specifications and decorators.

Overview
- Specs
  • Option: named, value-bearing flag (``--name=value`` / ``-n=value``) with the
    set of values offered to tab completion.
  • Switch: named, presence-only flag (``--name`` / ``-n``).

- Decorators
  • @option(...): build an Option whose completion values are computed by the
    decorated function each time they are requested (e.g., live containers).

- Introspection & representation
  • SpecType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields declared in __introspectable__ as read-only properties.

Naming rules (sanitized on construction)
- longhand: non-empty string without hyphen prefix, whitespace or '='. Hyphens
  are added when the flag is rendered (``--longhand``).
- shorthand: Unset or exactly one character (not '-', '=' or whitespace).
  Rendered as ``-s``.
- values (Option only): an iterable of strings (duplicates rejected) or a
  zero-argument callable returning one.

Quick example:
    >>> shell = Option("shell", "s", values=("bash", "sh"))
    >>> shell.names
    ['--shell', '-s']
    >>> shell.matching("b")
    ['bash']
    ...
    >>> @option("container", "c")
    >>> def container(): return ["web", "db"]
"""
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .utils import *


class SpecType(type):
    """
    Metaclass that turns specs into introspectable, read-only descriptors.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printing.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

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
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(longhand='shell', shorthand='s', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_named_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the naming metadata shared by Option and Switch.

    Responsibilities
    - longhand: required, a non-empty string after trimming; must not be given with
      its hyphens and must not contain whitespace or '='.
    - shorthand: Unset or a single character that is neither '-', '=' nor whitespace.
      Unset is normalized to None.
    - descr: Unset or a non-empty string/Text; Unset is normalized to None.

    Raises
    - TypeError: when a field has the wrong type.
    - ValueError: when a field is empty or malformed.

    Notes
    - This function mutates the provided metadata dict in place.
    """
    if not isinstance(longhand := metadata["longhand"], str):
        raise TypeError(f"{cls.__typename__} 'longhand' must be a string")
    elif not (longhand := longhand.strip()):
        raise ValueError(f"{cls.__typename__} 'longhand' cannot be empty")
    elif longhand.startswith("-"):
        raise ValueError(f"{cls.__typename__} 'longhand' {longhand!r} must be given without hyphens (they are added for you)")
    elif re.search(r"[\s=]", longhand):
        raise ValueError(f"{cls.__typename__} 'longhand' {longhand!r} cannot contain whitespaces or '='")
    metadata["longhand"] = longhand

    if not isinstance(shorthand := metadata["shorthand"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'shorthand' must be a string")
    elif isinstance(shorthand, str):
        if len(shorthand) != 1:
            raise ValueError(f"{cls.__typename__} 'shorthand' {shorthand!r} must be exactly one character")
        if shorthand == "-" or shorthand == "=" or shorthand.isspace():
            raise ValueError(f"{cls.__typename__} 'shorthand' {shorthand!r} must be given without hyphens")
    metadata["shorthand"] = coalesce(shorthand)

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_values(cls, values, /):
    """
    Internal: normalize a completion value set into a tuple of strings.

    - Non-iterables (and bare strings, which would complete letter by letter) are rejected.
    - Every value must be a string; duplicates are rejected to keep hints stable.
    """
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise TypeError(f"{cls.__typename__} 'values' must be an iterable of strings")
    sanitized = []
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"{cls.__typename__} 'values' must be an iterable of strings")
        if value in sanitized:
            raise ValueError(f"{cls.__typename__} 'values' cannot contain duplicates")
        sanitized.append(value)
    return tuple(sanitized)


class Option(metaclass=SpecType):
    """
    Named, value-bearing flag specification.

    An option is typed as ``--longhand=value`` or ``-s=value``; the dispatcher
    stores the raw text after the first '=' under the longhand name. The
    completion engine offers the option's values once the user has typed the
    option name and the '='.

    Highlights
    - values: static sequence of strings or a zero-argument callable (dynamic
      provider, evaluated on every completion request).
    - Values are offered to completion only; they never restrict what the
      dispatcher accepts (validation is left to the command implementation).
    """

    __introspectable__ = (
        "longhand",
        "shorthand",
        "values",
        "descr",
    )

    def __init__(self, longhand, shorthand=Unset, /, values=(), descr=Unset):
        """
        Construct an Option spec.

        Parameters
        - longhand: str
          Long name without hyphens, e.g. "encoding" for ``--encoding=hevc``.
        - shorthand: Unset | str
          Single-character short name without hyphen, e.g. "p" for ``-p=80:80``.
        - values: Iterable[str] | Callable[[], Iterable[str]]
          Values offered to tab completion once ``--longhand=`` is typed.
        - descr: Unset | str
          Short description, shown by pretty printers only.
        """
        metadata = {
            "longhand": longhand,
            "shorthand": shorthand,
            "values": values,
            "descr": descr,
        }
        _sanitize_named_metadata(type(self), metadata)
        if not callable(metadata["values"]):
            metadata["values"] = _sanitize_values(type(self), metadata["values"])

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        """
        Hyphen-prefixed spellings of this option, longhand first.
        """
        return ["--" + self._longhand] + (["-" + self._shorthand] if self._shorthand else [])

    def completions(self):
        """
        Materialize the completion values (calls the dynamic provider, if any).
        """
        if callable(self._values):
            return list(_sanitize_values(type(self), self._values()))
        return list(self._values)

    def matching(self, partial, /):
        """
        Return the completion values that start with the partially typed value.
        """
        return [value for value in self.completions() if value.startswith(partial)]


class Switch(metaclass=SpecType):
    """
    Named, presence-only flag specification.

    A switch is typed as ``--longhand`` or ``-s``; the dispatcher records its
    longhand name when present. Switches are assumed off when absent.
    """

    __introspectable__ = (
        "longhand",
        "shorthand",
        "descr",
    )

    def __init__(self, longhand, shorthand=Unset, /, descr=Unset):
        """
        Construct a Switch spec.

        Parameters
        - longhand: str
          Long name without hyphens, e.g. "recursive" for ``--recursive``.
        - shorthand: Unset | str
          Single-character short name without hyphen, e.g. "r" for ``-r``.
        - descr: Unset | str
          Short description, shown by pretty printers only.
        """
        metadata = {
            "longhand": longhand,
            "shorthand": shorthand,
            "descr": descr,
        }
        _sanitize_named_metadata(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def names(self):
        """
        Hyphen-prefixed spellings of this switch, longhand first.
        """
        return ["--" + self._longhand] + (["-" + self._shorthand] if self._shorthand else [])


def option(*args, **kwargs):
    """
    Decorator/factory for an Option whose completion values are computed lazily.

    Usage
        @option("container", "c")
        def container():
            return running_containers()

    Behavior
    - The decorated zero-argument function becomes the option's value provider
      and is called each time completion needs the values.
    - The decorator returns the configured Option instance (not the function).

    Parameters
    - *args, **kwargs: forwarded to Option(...) (longhand, shorthand, descr).
      Passing 'values' is rejected since the decorated function provides them.
    """
    if "values" in kwargs:
        raise TypeError("@option() values are provided by the decorated function")

    @rename("option")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@option() must be applied to a callable")
        return Option(*args, values=callback, **kwargs)

    return wrapper


__all__ = (
    # Classes (specifications)
    "Option",
    "Switch",

    # Decorators
    "option",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del SpecType
