"""Types used to define feature tests: steps, features, builders and tables."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from featureflow.types import Context, Level, T

StepFunc = Callable[[Context, T, Any], Context]


@dataclass(frozen=True)
class Step:
    """A named unit of work at a given level of a feature."""

    name: str
    level: Level
    func: Optional[StepFunc] = None


@dataclass
class Feature:
    """A testable feature: a name, labels and ordered steps."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)
    steps: list[Step] = field(default_factory=list)


class FeatureBuilder:
    """Builds a Feature step by step."""

    def __init__(self, name: str):
        self._feature = Feature(name)

    def with_label(self, key: str, value: str) -> FeatureBuilder:
        """Add a label key/value pair."""
        self._feature.labels[key] = value
        return self

    def with_step(self, name: str, level: Level, fn: Optional[StepFunc]) -> FeatureBuilder:
        """Add a step at the given level."""
        self._feature.steps.append(Step(name, level, fn))
        return self

    def setup(self, fn: StepFunc) -> FeatureBuilder:
        """Add a setup step named after the feature."""
        return self.with_setup(f"{self._feature.name}-setup", fn)

    def with_setup(self, name: str, fn: StepFunc) -> FeatureBuilder:
        """Add a named setup step."""
        return self.with_step(name, Level.SETUP, fn)

    def teardown(self, fn: StepFunc) -> FeatureBuilder:
        """Add a teardown step named after the feature."""
        return self.with_teardown(f"{self._feature.name}-teardown", fn)

    def with_teardown(self, name: str, fn: StepFunc) -> FeatureBuilder:
        """Add a named teardown step."""
        return self.with_step(name, Level.TEARDOWN, fn)

    def assess(self, desc: str, fn: StepFunc) -> FeatureBuilder:
        """Add an assessment step."""
        return self.with_step(desc, Level.ASSESS, fn)

    def feature(self) -> Feature:
        """Return the feature being built."""
        return self._feature


def new(name: str) -> FeatureBuilder:
    """Start building a feature called ``name``."""
    return FeatureBuilder(name)


def get_steps_by_level(steps: Optional[Iterable[Step]], level: Level) -> list[Step]:
    """Return the steps at ``level``, in order."""
    if steps is None:
        return []
    return [step for step in steps if step.level == level]


def filter_steps_by_name(
    steps: Optional[Iterable[Step]], pattern: str | re.Pattern[str]
) -> list[Step]:
    """Return the steps whose names match ``pattern`` anywhere."""
    if steps is None:
        return []
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return [step for step in steps if regex.search(step.name)]


@dataclass
class TableEntry:
    """One row of a table-driven feature: a name and an assessment."""

    name: str = ""
    assessment: Optional[StepFunc] = None


class Table(list):
    """A list of TableEntry rows, each becoming an assessment."""

    def build(self, feature_name: str = "") -> FeatureBuilder:
        """Turn the rows into a FeatureBuilder; unnamed rows get generated names."""
        builder = new(feature_name)
        for index, entry in enumerate(self):
            name = entry.name or f"Assessment-{index}"
            if entry.assessment is not None:
                builder.assess(name, entry.assessment)
        return builder