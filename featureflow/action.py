"""Groups of environment functions run at a given point of a test run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional

from featureflow.envconf import Config
from featureflow.features import Feature
from featureflow.types import Context, T

EnvFunc = Callable[[Context, Config], Context]
TestEnvFunc = Callable[[Context, Config, T], Context]
FeatureEnvFunc = Callable[[Context, Config, T, Feature], Context]


class ActionRole(IntEnum):
    """When an action runs."""

    SETUP = 0
    BEFORE_TEST = 1
    BEFORE_FEATURE = 2
    AFTER_FEATURE = 3
    AFTER_TEST = 4
    FINISH = 5


class ActionError(Exception):
    """A function of an action failed; ``ctx`` is the context reached before it."""

    def __init__(self, ctx: Context, cause: BaseException):
        super().__init__(str(cause))
        self.ctx = ctx
        self.cause = cause


@dataclass
class Action:
    """A group of environment functions sharing one role."""

    role: ActionRole
    funcs: list[Optional[EnvFunc]] = field(default_factory=list)
    feature_funcs: list[Optional[FeatureEnvFunc]] = field(default_factory=list)
    test_funcs: list[Optional[TestEnvFunc]] = field(default_factory=list)

    def run(self, ctx: Context, cfg: Config) -> Context:
        """Run the environment functions in order, threading the context."""
        return self._chain(ctx, self.funcs, cfg)

    def run_with_t(self, ctx: Context, cfg: Config, t: T) -> Context:
        """Run the before/after-test functions, passing the test handle."""
        if self.role not in (ActionRole.BEFORE_TEST, ActionRole.AFTER_TEST):
            raise ValueError(
                "run_with_t() is only valid for actions BEFORE_TEST and AFTER_TEST"
            )
        return self._chain(ctx, self.test_funcs, cfg, t)

    def run_with_feature(self, ctx: Context, cfg: Config, t: T, feature: Feature) -> Context:
        """Run the before/after-feature functions, passing the test handle and feature."""
        if self.role not in (ActionRole.BEFORE_FEATURE, ActionRole.AFTER_FEATURE):
            raise ValueError(
                "run_with_feature() is only valid for actions BEFORE_FEATURE and AFTER_FEATURE"
            )
        return self._chain(ctx, self.feature_funcs, cfg, t, feature)

    @staticmethod
    def _chain(ctx: Context, funcs: list[Any], *args: Any) -> Context:
        for func in funcs:
            if func is None:
                continue
            try:
                ctx = func(ctx, *args)
            except Exception as exc:
                raise ActionError(ctx, exc) from exc
        return ctx