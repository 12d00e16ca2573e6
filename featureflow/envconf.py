"""Configuration for a test environment: namespace, kubeconfig and feature filters."""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field
from typing import Iterable, Optional

from featureflow import flags


@dataclass
class Config:
    """Environment configuration; the ``with_*`` methods update it and return it."""

    kubeconfig: str = ""
    namespace: str = ""
    assessment_regex: Optional[re.Pattern[str]] = None
    feature_regex: Optional[re.Pattern[str]] = None
    labels: dict[str, str] = field(default_factory=dict)
    skip_feature_regex: Optional[re.Pattern[str]] = None
    skip_labels: dict[str, str] = field(default_factory=dict)
    skip_assessment_regex: Optional[re.Pattern[str]] = None
    parallel_tests: bool = False

    def with_kubeconfig_file(self, kubecfg: str) -> Config:
        """Set the kubeconfig file path."""
        self.kubeconfig = kubecfg
        return self

    def with_namespace(self, ns: str) -> Config:
        """Set the environment namespace."""
        self.namespace = ns
        return self

    def with_random_namespace(self) -> Config:
        """Set the environment namespace to a random value."""
        self.namespace = random_name("testns-", 32)
        return self

    def with_assessment_regex(self, regex: str) -> Config:
        """Select assessments whose names match ``regex``."""
        self.assessment_regex = re.compile(regex)
        return self

    def with_skip_assessment_regex(self, regex: str) -> Config:
        """Skip assessments whose names match ``regex``."""
        self.skip_assessment_regex = re.compile(regex)
        return self

    def with_feature_regex(self, regex: str) -> Config:
        """Select features whose names match ``regex``."""
        self.feature_regex = re.compile(regex)
        return self

    def with_skip_feature_regex(self, regex: str) -> Config:
        """Skip features whose names match ``regex``."""
        self.skip_feature_regex = re.compile(regex)
        return self

    def with_labels(self, labels: dict[str, str]) -> Config:
        """Run only features carrying all of these labels."""
        self.labels = labels
        return self

    def with_skip_labels(self, labels: dict[str, str]) -> Config:
        """Skip features carrying any of these labels."""
        self.skip_labels = labels
        return self

    def with_parallel_test_enabled(self) -> Config:
        """Allow features to be tested in parallel."""
        self.parallel_tests = True
        return self


def new_with_kube_config(kubeconfig: str) -> Config:
    """Return an empty configuration pointing at ``kubeconfig``."""
    return Config().with_kubeconfig_file(kubeconfig)


def new_from_flags(args: Optional[Iterable[str]] = None) -> Config:
    """Build a configuration from command-line flags (the process arguments by default)."""
    env_flags = flags.parse() if args is None else flags.parse_args(args)
    cfg = Config()
    if env_flags.assessment:
        cfg.assessment_regex = re.compile(env_flags.assessment)
    if env_flags.feature:
        cfg.feature_regex = re.compile(env_flags.feature)
    cfg.labels = env_flags.labels
    cfg.namespace = env_flags.namespace
    cfg.kubeconfig = env_flags.kubeconfig
    if env_flags.skip_features:
        cfg.skip_feature_regex = re.compile(env_flags.skip_features)
    if env_flags.skip_assessment:
        cfg.skip_assessment_regex = re.compile(env_flags.skip_assessment)
    cfg.skip_labels = env_flags.skip_labels
    cfg.parallel_tests = env_flags.parallel
    return cfg


def random_name(prefix: str, n: int = 32) -> str:
    """Return a random name of length ``n`` starting with ``prefix``.

    A zero ``n`` means 32; a prefix at least ``n`` long is returned unchanged.
    """
    if n == 0:
        n = 32
    if len(prefix) >= n:
        return prefix
    return f"{prefix}-{secrets.token_hex(n)}"[:n]