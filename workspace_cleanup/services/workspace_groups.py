"""Workspace grouping based on qualified workflow run names.

Restarted runs append one numeric component to the run they restart, and
all runs of a restart chain share one workspace:

    helloworld-demo.1    -> helloworld-demo.1
    helloworld-demo.1.1  -> helloworld-demo.1
    helloworld-demo.1.2  -> helloworld-demo.1
"""

from __future__ import annotations

import re

_NUMERIC_COMPONENT = re.compile(r"^\d+$")


def split_qualified_name(qualified_name: str | None) -> tuple[str, list[str]]:
    """Split a qualified name into its base and its trailing numeric components."""
    if not qualified_name:
        return "", []
    parts = str(qualified_name).split(".")
    i = len(parts) - 1
    while i >= 0 and _NUMERIC_COMPONENT.match(parts[i]):
        i -= 1
    return ".".join(parts[: i + 1]), parts[i + 1 :]


def build_qualified_name(name: str, run: str | int | None = None) -> str:
    if run is None or str(run) == "":
        return name
    return f"{name}.{run}"


def resolve_workspace_group(qualified_name: str | None) -> str | None:
    """Return the workspace group key for a qualified name, or None when ungrouped.

    Names without a numeric suffix, or made only of numeric components, have
    no group. Non-numeric run identifiers are not grouped either.
    """
    base, numeric = split_qualified_name(qualified_name)
    if not base or not numeric:
        return None
    # first numeric suffix is the original run of the chain
    return f"{base}.{numeric[0]}"
