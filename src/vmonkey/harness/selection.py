"""Target set resolution.

A set spec is one of:
- ``TargetList``: an explicit list of targets, used as-is;
- ``NamePattern``: a regular expression matched against target nicknames;
- ``NamedRef``: the name of an operation on the test case that produces
  the set.

Resolving a ``NamedRef`` runs the operation through the execution wrapper
and resolves whatever it returns. Nothing guards against an operation
that refers back to itself; such cycles recurse until Python's recursion
limit is hit.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from vmonkey.harness.errors import SetResolutionError
from vmonkey.models.target import Target

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetList:
    targets: list[Any] = field(default_factory=list)


@dataclass(frozen=True)
class NamePattern:
    regex: str


@dataclass(frozen=True)
class NamedRef:
    name: str


SetSpec = Union[TargetList, NamePattern, NamedRef]


def coerce_set_spec(value: Any, namespace: Any = None) -> SetSpec:
    """Turn a raw value into a tagged set spec.

    A string naming a callable attribute of ``namespace`` becomes a
    ``NamedRef``; this takes precedence over treating it as a pattern.
    """
    if isinstance(value, (TargetList, NamePattern, NamedRef)):
        return value
    if isinstance(value, (list, tuple)):
        return TargetList(list(value))
    if isinstance(value, str):
        if namespace is not None and callable(getattr(namespace, value, None)):
            return NamedRef(value)
        return NamePattern(value)
    if isinstance(value, Target):
        return TargetList([value])
    raise SetResolutionError(f"Unsupported target set spec: {value!r}")


def resolve(
    spec: Any,
    default_targets: Sequence[Any],
    invoke: Callable[[str], Any] | None = None,
    namespace: Any = None,
) -> list[Any]:
    """Resolve a set spec to an ordered list of targets.

    Args:
        spec: A ``SetSpec`` or a raw value accepted by ``coerce_set_spec``
        default_targets: Targets filtered by ``NamePattern``, in order
        invoke: Runs a named operation; required for ``NamedRef``
        namespace: Object whose callables make strings into ``NamedRef``

    Returns:
        The targets, possibly empty
    """
    spec = coerce_set_spec(spec, namespace)

    if isinstance(spec, TargetList):
        return list(spec.targets)

    if isinstance(spec, NamePattern):
        regex = re.compile(spec.regex)
        selected = [t for t in default_targets if regex.search(t.nickname)]
        logger.debug(f"Pattern {spec.regex!r} matched {len(selected)} of {len(default_targets)} targets")
        return selected

    if invoke is None:
        raise SetResolutionError(f"Cannot resolve operation {spec.name!r} without an invoker")

    result = invoke(spec.name)
    if isinstance(result, (list, tuple)):
        return list(result)
    if isinstance(result, (str, TargetList, NamePattern, NamedRef)):
        return resolve(result, default_targets, invoke, namespace)
    return [result]
