"""Test environments: register setup, hook and teardown functions and run features."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from featureflow import envconf
from featureflow.action import (
    Action,
    ActionError,
    ActionRole,
    EnvFunc,
    FeatureEnvFunc,
    TestEnvFunc,
)
from featureflow.envconf import Config
from featureflow.features import Feature, Step, get_steps_by_level
from featureflow.types import Context, Level, T

_log = logging.getLogger(__name__)


def _copy_feature(feature: Feature) -> Feature:
    """Return an informational copy of ``feature`` whose steps carry no functions."""
    return Feature(
        feature.name,
        dict(feature.labels),
        [Step(step.name, step.level, None) for step in feature.steps],
    )


class Environment:
    """An environment in which features are tested."""

    def __init__(self, ctx: Optional[Context] = None, cfg: Optional[Config] = None):
        self.ctx: Optional[Context] = Context.background() if ctx is None else ctx
        self.cfg: Config = Config() if cfg is None else cfg
        self.actions: list[Action] = []

    def with_context(self, ctx: Context) -> Environment:
        """Return a new environment sharing config and actions but using ``ctx``."""
        if ctx is None:
            raise ValueError("nil context")
        env = Environment(ctx, self.cfg)
        env.actions.extend(self.actions)
        return env

    def setup(self, *args: EnvFunc) -> Environment:
        """Register functions run once before any test."""
        if args:
            self.actions.append(Action(ActionRole.SETUP, funcs=list(args)))
        return self

    def before_each_test(self, *args: TestEnvFunc) -> Environment:
        """Register functions run before each call to test()."""
        if args:
            self.actions.append(Action(ActionRole.BEFORE_TEST, test_funcs=list(args)))
        return self

    def before_each_feature(self, *args: FeatureEnvFunc) -> Environment:
        """Register functions run before each feature is tested."""
        if args:
            self.actions.append(
                Action(ActionRole.BEFORE_FEATURE, feature_funcs=list(args))
            )
        return self

    def after_each_feature(self, *args: FeatureEnvFunc) -> Environment:
        """Register functions run after each feature is tested."""
        if args:
            self.actions.append(
                Action(ActionRole.AFTER_FEATURE, feature_funcs=list(args))
            )
        return self

    def after_each_test(self, *args: TestEnvFunc) -> Environment:
        """Register functions run after each call to test()."""
        if args:
            self.actions.append(Action(ActionRole.AFTER_TEST, test_funcs=list(args)))
        return self

    def finish(self, *args: EnvFunc) -> Environment:
        """Register functions run at the end of the suite."""
        if args:
            self.actions.append(Action(ActionRole.FINISH, funcs=list(args)))
        return self

    def actions_by_role(self, role: ActionRole) -> list[Action]:
        """Return the registered actions of ``role``, in registration order."""
        return [action for action in self.actions if action.role == role]

    def test(self, t: T, *args: Feature) -> None:
        """Test the features one after another."""
        self._process_tests(t, False, args)

    def test_in_parallel(self, t: T, *args: Feature) -> None:
        """Test the features concurrently when the config allows parallel tests."""
        self._process_tests(t, True, args)

    def run(self, suite: Callable[[], int]) -> int:
        """Run setups, then ``suite``, then finishes; return the suite's exit code.

        A failing setup stops everything; a failing finish is logged and skipped.
        """
        self._require_context()
        for action in self.actions_by_role(ActionRole.SETUP):
            try:
                self.ctx = action.run(self.ctx, self.cfg)
            except ActionError as err:
                self.ctx = err.ctx
                raise
        exit_code = suite()
        for action in self.actions_by_role(ActionRole.FINISH):
            try:
                self.ctx = action.run(self.ctx, self.cfg)
            except ActionError as err:
                self.ctx = err.ctx
                _log.error("Finish action handlers: %s", err)
        return exit_code

    def _require_context(self) -> None:
        if self.ctx is None:
            raise RuntimeError("context not set")

    def _process_test_actions(self, t: T, actions: list[Action], label: str) -> None:
        for action in actions:
            try:
                self.ctx = action.run_with_t(self.ctx, self.cfg, t)
            except ActionError as err:
                self.ctx = err.ctx
                t.fatal(f"{label} failure: {err}")

    def _process_feature_actions(
        self, t: T, actions: list[Action], feature: Feature, label: str
    ) -> None:
        for action in actions:
            try:
                self.ctx = action.run_with_feature(
                    self.ctx, self.cfg, t, _copy_feature(feature)
                )
            except ActionError as err:
                self.ctx = err.ctx
                t.fatal(f"{label} failure: {err}")

    def _process_test_feature(self, t: T, name: str, feature: Feature) -> None:
        before = self.actions_by_role(ActionRole.BEFORE_FEATURE)
        after = self.actions_by_role(ActionRole.AFTER_FEATURE)
        self._process_feature_actions(t, before, feature, "BeforeEachFeature")
        self.ctx = self._exec_feature(self.ctx, t, name, feature)
        self._process_feature_actions(t, after, feature, "AfterEachFeature")

    def _process_tests(self, t: T, parallel: bool, test_features: tuple[Feature, ...]) -> None:
        self._require_context()
        if not test_features:
            t.log("No test features provided, skipping test")
            return

        self._process_test_actions(
            t, self.actions_by_role(ActionRole.BEFORE_TEST), "BeforeEachTest"
        )

        run_in_parallel = self.cfg.parallel_tests and parallel
        if run_in_parallel:
            _log.debug("Running test features in parallel")

        named = [
            (feature.name or f"Feature-{index}", feature)
            for index, feature in enumerate(test_features, 1)
        ]

        if run_in_parallel:
            errors: list[BaseException] = []
            errors_lock = threading.Lock()

            def worker(name: str, feature: Feature) -> None:
                try:
                    self._process_test_feature(t, name, feature)
                except BaseException as exc:  # re-raised in the calling thread
                    with errors_lock:
                        errors.append(exc)

            threads = [
                threading.Thread(target=worker, args=item, daemon=True) for item in named
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()
            if errors:
                raise errors[0]
        else:
            for name, feature in named:
                self._process_test_feature(t, name, feature)

        self._process_test_actions(
            t, self.actions_by_role(ActionRole.AFTER_TEST), "AfterEachTest"
        )

    def _exec_feature(self, ctx: Context, t: T, name: str, feature: Feature) -> Context:
        cfg = self.cfg

        def run_feature(ft: T) -> None:
            nonlocal ctx
            if cfg.skip_feature_regex is not None and cfg.skip_feature_regex.search(name):
                ft.skip(f'Skipping feature "{name}": name matched')
            if cfg.feature_regex is not None and not cfg.feature_regex.search(name):
                ft.skip(f'Skipping feature "{name}": name not matched')
            for key, value in (cfg.labels or {}).items():
                actual = feature.labels.get(key, "")
                if actual != value:
                    ft.skip(f'Skipping feature "{name}": unmatched label "{key}={actual}"')
            for key, value in (cfg.skip_labels or {}).items():
                actual = feature.labels.get(key, "")
                if actual == value:
                    ft.skip(
                        f'Skipping feature "{name}": matched label provided in '
                        f'--skip-labels "{key}={actual}"'
                    )

            for step in get_steps_by_level(feature.steps, Level.SETUP):
                if step.func is not None:
                    ctx = step.func(ctx, ft, cfg)

            for index, step in enumerate(get_steps_by_level(feature.steps, Level.ASSESS), 1):
                ft.run(step.name or f"Assessment-{index}", _assessment(step))

            for step in get_steps_by_level(feature.steps, Level.TEARDOWN):
                if step.func is not None:
                    ctx = step.func(ctx, ft, cfg)

        def _assessment(step: Step) -> Callable[[T], None]:
            def run_assessment(at: T) -> None:
                nonlocal ctx
                if (
                    cfg.skip_assessment_regex is not None
                    and cfg.skip_assessment_regex.search(step.name)
                ):
                    at.skip(f'Skipping assessment "{step.name}": name matched')
                if cfg.assessment_regex is not None and not cfg.assessment_regex.search(
                    step.name
                ):
                    at.skip(f'Skipping assessment "{step.name}": name not matched')
                if step.func is not None:
                    ctx = step.func(ctx, at, cfg)

            return run_assessment

        t.run(name, run_feature)
        return ctx


def new() -> Environment:
    """Create an environment with an empty configuration."""
    return Environment()


def new_parallel() -> Environment:
    """Create an environment whose configuration allows parallel feature tests."""
    return Environment(cfg=Config().with_parallel_test_enabled())


def new_with_config(cfg: Config) -> Environment:
    """Create an environment using ``cfg``."""
    return Environment(cfg=cfg)


def new_with_kube_config(kubeconfigfile: str) -> Environment:
    """Create an environment whose configuration points at ``kubeconfigfile``."""
    return Environment(cfg=envconf.new_with_kube_config(kubeconfigfile))


def new_in_cluster_config() -> Environment:
    """Create an environment that assumes an in-cluster kubeconfig."""
    return Environment(cfg=envconf.new_with_kube_config(""))


def new_with_context(ctx: Context, cfg: Config) -> Environment:
    """Create an environment with the given context and configuration."""
    if ctx is None:
        raise ValueError("context is nil")
    if cfg is None:
        raise ValueError("environment config is nil")
    return Environment(ctx, cfg)