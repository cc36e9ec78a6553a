"""
Bash integration: the completion script that wires a command into bash.

The script registers a `complete -F` hook that re-invokes the program as
    <program> --autocomplete-help <0|1> <words typed so far...>
and loads each printed line into COMPREPLY. `-o nospace` keeps bash from
appending its own space: hints carry their trailing space themselves, and
option headers ('--name=') deliberately have none.
"""
import os.path
import re
import shlex
import sys
import textwrap

from .utils import Unset, coalesce

_TEMPLATE = textwrap.dedent("""\
    #!/usr/bin/env bash
    __%(function)s_completions()
    {
        local LINE="${COMP_LINE:0:${COMP_POINT}}"
        local ENDS_IN_SPACE=0
        local WORDS=()

        if [[ "${LINE}" == *[[:space:]] ]]; then
            ENDS_IN_SPACE=1
        fi

        read -ra WORDS <<< "${LINE}"
        mapfile -t COMPREPLY < <(%(program)s %(sentinel)s "${ENDS_IN_SPACE}" "${WORDS[@]:1}")
    }

    complete -o nospace -F __%(function)s_completions %(program)s
""")


def script(command, /, program=Unset, *, sentinel="--autocomplete-help"):
    """
    Render the bash completion script for a command tree.

    parameters
    - command: the root command (its name names the shell function).
    - program: executable name the hook is registered for; defaults to the
      basename of sys.argv[0].
    - sentinel: first argument that switches the program into completion mode.

    returns
    - str: the script text, newline-terminated.
    """
    program = coalesce(program, os.path.basename(sys.argv[0]))
    if not isinstance(program, str) or not program.strip():
        raise TypeError("script() 'program' must be a non-empty string")

    return _TEMPLATE % {
        "function": re.sub(r"\W", "_", command.name),
        "program": shlex.quote(program.strip()),
        "sentinel": sentinel,
    }


__all__ = (
    "script",
)
