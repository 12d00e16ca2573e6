# featureflow

featureflow organises end-to-end tests as **features**. A feature is a named
set of steps: setups, assessments and teardowns. An **environment** runs
features. It passes an immutable `Context` through every step and runs hooks
before and after each test and each feature.

## Installation

```
pip install featureflow
```

## Defining features

A step function takes `(ctx, t, cfg)` and returns the context for the next
step.

```python
from featureflow import features
from featureflow.types import Level

def check(ctx, t, cfg):
    t.log("checking")
    return ctx.with_value("checked", True)

feat = (
    features.new("storage")
    .with_label("tier", "beta")
    .setup(lambda ctx, t, cfg: ctx)
    .assess("volume can be mounted", check)
    .teardown(lambda ctx, t, cfg: ctx)
    .feature()
)

assessments = features.get_steps_by_level(feat.steps, Level.ASSESS)
```

`setup(fn)` and `teardown(fn)` name their steps `<feature>-setup` and
`<feature>-teardown`. Use `with_setup(name, fn)` and `with_teardown(name, fn)`
to give them names of your own. `features.filter_steps_by_name(steps, pattern)`
keeps the steps whose names match a regular expression.

For table-driven assessments, put `features.TableEntry(name, assessment)`
items in a `features.Table`. `Table.build(feature_name)` turns them into a
`FeatureBuilder`. Rows without a name are called `Assessment-<index>`, and
rows without an assessment are dropped.

## Running features in an environment

```python
from featureflow import env, envconf
from featureflow.types import T

environment = env.new_with_config(envconf.Config().with_feature_regex("stor"))
environment.setup(lambda ctx, cfg: ctx.with_value("ready", True))
environment.before_each_test(lambda ctx, cfg, t: ctx)
environment.after_each_feature(lambda ctx, cfg, t, feature: ctx)

def suite():
    t = T("suite")
    environment.test(t, feat)
    return 1 if t.failed else 0

exit_code = environment.run(suite)
```

Hook signatures:

- Setup and finish functions take `(ctx, cfg)`.
- Before-test and after-test functions take `(ctx, cfg, t)`.
- Before-feature and after-feature functions take `(ctx, cfg, t, feature)`.

Each of them returns the updated context.

The feature a feature hook receives is a copy. Its steps carry no functions,
and changes made to it do not reach the real feature.

`Environment.run(suite)` works in three stages:

1. It runs the setup functions. If one raises, `run` raises
   `featureflow.action.ActionError` at once.
2. It calls `suite()`.
3. It runs the finish functions. A failure here is logged and the remaining
   finishes still run.

`run` returns the value that `suite()` returned.

`Environment.test(t, *features)` does the following:

1. Runs the before-test hooks once.
2. Runs each feature as a subtest of `t`. Setups run first, then each
   assessment as its own subtest, then teardowns.
3. Runs the after-test hooks once.

Features and assessments without a name are called `Feature-<n>` and
`Assessment-<n>`. If a test or feature hook raises, the failure is reported
through `t.fatal`.

`test_in_parallel` runs the features in threads. It does so only when the
configuration allows it, as it does for `env.new_parallel()` or after
`Config.with_parallel_test_enabled()`. Otherwise it behaves like `test`.

`featureflow.types.T` records what happened during a test run:

- `messages` holds the logged messages.
- `failed` and `skipped` hold the outcome.
- `subtests` holds the subtests.

Call `log`, `error`, `fatal`, `skip` and `run` from step functions.

## Filtering

These `envconf.Config` settings filter what runs:

- `with_feature_regex` runs only features whose names match.
- `with_skip_feature_regex` skips features whose names match.
- `with_assessment_regex` runs only assessments whose names match.
- `with_skip_assessment_regex` skips assessments whose names match.
- `with_labels` runs only features that carry every given label value.
- `with_skip_labels` skips a feature when any of its labels equals a given value.

Skipped features and assessments are marked `skipped` on their subtest.

`flags.parse_args(args)` reads these options, written with `-` or `--` and
with the value either as the next argument or after `=`:

- `-feature`
- `-assess`
- `-labels k=v,...`
- `-skip-features`
- `-skip-assessment`
- `-skip-labels k=v,...`
- `-namespace`
- `-kubeconfig`
- `-parallel`

A malformed option raises `ValueError`. `envconf.new_from_flags(args)` builds
a `Config` from these options; without `args` it reads `sys.argv[1:]`.

## What it does not do

The package does not connect to a cluster. It does not create clusters or
namespaces, and it does not load images. `Config` only stores a kubeconfig
path and a namespace name for your own step functions to use.
`Config.with_random_namespace()` and `envconf.random_name(prefix, n)` generate
names only.

## Running the tests

```
pip install featureflow[test]
pytest
```