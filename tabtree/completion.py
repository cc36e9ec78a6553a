"""
Tabtree completion engine: hints for a partially typed invocation.

complete(command, tokens, spaced) mirrors the dispatcher's walk over the same
tree, but only the last word is ever completed:

- flags and positionals before the last word are skipped (they are settled);
- a settled word naming a subcommand hands the rest of the line over to it;
- the last word is completed depending on its kind and on whether the cursor
  already sits after a space (`spaced`).

Formatting rule
- subcommand names, switch headers and positional values end with one space
  (the word is complete, the shell moves on);
- option headers end with '=' and no space, so the cursor lands right where
  the value is typed next.
"""


def _spaced(hints):
    return [hint + " " for hint in hints]


def _prefixed(candidates, prefix):
    return [candidate for candidate in candidates if candidate.startswith(prefix)]


def _subcommands(command):
    return [child.name for child in command.children]


def _options(command):
    return [name + "=" for option in command.options for name in option.names]


def _switches(command):
    return [name for switch in command.switches for name in switch.names]


def _everything(command):
    """
    Full hint set of a node: subcommands, options, switches, then positionals.
    """
    return [
        *_spaced(_subcommands(command)),
        *_options(command),
        *_spaced(_switches(command)),
        *_spaced(command.possibilities()),
    ]


def complete(command, tokens, spaced, /, *, index=1):
    """
    Return the ordered completion hints for tokens typed so far.

    parameters
    - command: node the tokens are matched against.
    - tokens: words already typed (program name excluded), whitespace-split.
    - spaced: True when the cursor follows a space (the last word is finished).
    - index: 1-based position of the first token, used in fault messages.

    faults
    - UnknownOptionError when the last word is '--name=partial' and the node has
      no such option (its value set cannot be looked up).

    notes
    - duplicates are possible (e.g., a positional equal to a subcommand name)
      and harmless to shell completion.
    - the tree is only read; identical inputs give identical hints.
    """
    tokens = list(tokens)
    if not tokens:
        return _everything(command)

    hints = []
    for offset, token in enumerate(tokens):
        last = offset == len(tokens) - 1

        if token.startswith("-"):
            if not last:
                continue
            if spaced:
                # a subcommand never follows a flag, so only flags and positionals
                hints += _spaced(_switches(command))
                hints += _options(command)
                hints += _spaced(command.possibilities())
            elif "=" in token:
                name, partial = token.split("=", 1)
                option = command._resolve_option(name, index=index + offset)
                hints += _spaced(option.matching(partial))
            else:
                hints += _spaced(_prefixed(_switches(command), token))
                hints += _prefixed(_options(command), token)
            break

        child = command._child(token)

        if not last:
            if child is not None:
                return complete(child, tokens[offset + 1:], spaced, index=index + offset + 1)
            continue

        if spaced:
            if child is not None:
                return complete(child, [], spaced, index=index + offset + 1)
            hints += _everything(command)
        else:
            hints += _spaced(_prefixed(_subcommands(command), token))
            hints += _spaced(_prefixed(command.possibilities(), token))

    return hints


__all__ = (
    "complete",
)
