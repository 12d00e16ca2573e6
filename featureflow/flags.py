"""Command-line flags that select and filter features and assessments."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable, Optional

_USAGE = {
    "feature": "Regular expression to select feature(s) to test",
    "assess": "Regular expression to select assessment(s) to run",
    "labels": "Comma-separated key=value to filter features by labels",
    "kubeconfig": "Path to a cluster kubeconfig file (optional)",
    "namespace": "A namespace value to use for testing (optional)",
    "skip-labels": "Regular expression to skip label(s) to run",
    "skip-features": "Regular expression to skip feature(s) to run",
    "skip-assessment": "Regular expression to skip assessment(s) to run",
    "parallel": "Run test features in parallel",
}

_STRING_FLAGS = {
    "feature": "feature",
    "assess": "assessment",
    "kubeconfig": "kubeconfig",
    "namespace": "namespace",
    "skip-features": "skip_features",
    "skip-assessment": "skip_assessment",
}
_LABEL_FLAGS = {"labels": "labels", "skip-labels": "skip_labels"}
_BOOL_FLAGS = {"parallel": "parallel"}

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


class LabelsMap(dict):
    """A label mapping filled from comma-separated key=value text."""

    def set(self, val: str) -> None:
        """Parse ``key=value[,key=value...]`` into the mapping."""
        for label in val.split(","):
            kv = label.split("=")
            if len(kv) != 2:
                raise ValueError(f"label format error: {label}")
            self[kv[0].strip()] = kv[1].strip()

    def __str__(self) -> str:
        items = " ".join(f"{k}:{v}" for k, v in sorted(self.items()))
        return f"map[{items}]"


@dataclass(frozen=True)
class EnvFlags:
    """Resolved flag values for the test framework."""

    feature: str = ""
    assessment: str = ""
    labels: LabelsMap = field(default_factory=LabelsMap)
    kubeconfig: str = ""
    namespace: str = ""
    skip_labels: LabelsMap = field(default_factory=LabelsMap)
    skip_features: str = ""
    skip_assessment: str = ""
    parallel: bool = False


def _parse_error(message: str) -> ValueError:
    return ValueError(f"flags parsing: {message}")


def parse_args(args: Iterable[str]) -> EnvFlags:
    """Parse ``args`` as framework flags; stop at the first non-flag argument."""
    values: dict[str, object] = {
        "labels": LabelsMap(),
        "skip_labels": LabelsMap(),
    }
    remaining = iter(args)
    for arg in remaining:
        if len(arg) < 2 or not arg.startswith("-"):
            break
        if arg == "--":
            break
        body = arg[2:] if arg.startswith("--") else arg[1:]
        if not body or body[0] in "-=":
            raise _parse_error(f"bad flag syntax: {arg}")
        name, sep, value = body.partition("=")
        has_value = bool(sep)

        if name in _BOOL_FLAGS:
            if not has_value or value in _TRUE:
                values[_BOOL_FLAGS[name]] = True
            elif value in _FALSE:
                values[_BOOL_FLAGS[name]] = False
            else:
                raise _parse_error(
                    f'invalid boolean value "{value}" for -{name}: parse error'
                )
            continue

        if name not in _STRING_FLAGS and name not in _LABEL_FLAGS:
            if name in ("h", "help"):
                raise _parse_error("flag: help requested")
            raise _parse_error(f"flag provided but not defined: -{name}")

        if not has_value:
            next_value: Optional[str] = next(remaining, None)
            if next_value is None:
                raise _parse_error(f"flag needs an argument: -{name}")
            value = next_value

        if name in _LABEL_FLAGS:
            target = values[_LABEL_FLAGS[name]]
            assert isinstance(target, LabelsMap)
            try:
                target.set(value)
            except ValueError as exc:
                raise _parse_error(
                    f'invalid value "{value}" for flag -{name}: {exc}'
                ) from exc
        else:
            values[_STRING_FLAGS[name]] = value

    return EnvFlags(**values)  # type: ignore[arg-type]


def parse() -> EnvFlags:
    """Parse the process command-line arguments."""
    return parse_args(sys.argv[1:])