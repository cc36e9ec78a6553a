"""
Structural validation of a command tree.

validate(command) walks the tree once, before it accepts any input, and
rejects definitions that would make routing or completion ambiguous:

- sibling subcommand names must be distinct;
- option longhands must be distinct, and shorthands distinct among themselves
  and from every longhand of the same node;
- the same rule applies to switches;
- a command with subcommands cannot own options or switches (flags attach to
  leaf commands only).

Violations raise DefinitionError naming the offending name.
"""


class DefinitionError(ValueError):
    """
    Raised when a command tree is structurally invalid.

    Attributes
    - name: the offending subcommand/option/switch name.
    - command: the command node where the violation was found.
    """

    def __init__(self, message, /, *, name, command):
        super().__init__(message)
        self.name = name
        self.command = command


def _route(command):
    return " ".join(step.name for step in command.path)


def _check_names(command, specs, kind):
    """
    Reject duplicated long/short names among one node's options (or switches).
    """
    longhands = set()
    for spec in specs:
        if spec.longhand in longhands:
            raise DefinitionError(
                f"command {_route(command)!r} {kind} name {spec.longhand!r} is not unique",
                name=spec.longhand,
                command=command,
            )
        longhands.add(spec.longhand)

    shorthands = set()
    for spec in specs:
        if spec.shorthand is None:
            continue
        if spec.shorthand in shorthands or spec.shorthand in longhands:
            raise DefinitionError(
                f"command {_route(command)!r} {kind} shorthand {spec.shorthand!r} is not unique",
                name=spec.shorthand,
                command=command,
            )
        shorthands.add(spec.shorthand)


def validate(command, /):
    """
    Recursively verify the naming invariants of a command tree.

    Returns the command itself so that it can be used inline:
        tool = validate(group("tool"))

    Raises
    - DefinitionError on the first violation found (depth-first, parents first).
    """
    children = command.children
    options = command.options
    switches = command.switches

    names = set()
    for child in children:
        if child.name in names:
            raise DefinitionError(
                f"command {_route(command)!r} subcommand name {child.name!r} is not unique",
                name=child.name,
                command=command,
            )
        names.add(child.name)

    if children and (options or switches):
        offending = (options or switches)[0].longhand
        raise DefinitionError(
            f"command {_route(command)!r} has subcommands and cannot own options or switches "
            f"(found {offending!r}); attach them to a leaf command instead",
            name=offending,
            command=command,
        )

    _check_names(command, options, "option")
    _check_names(command, switches, "switch")

    for child in children:
        validate(child)

    return command


__all__ = (
    "DefinitionError",
    "validate",
)
