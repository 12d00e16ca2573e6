[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "featureflow"
version = "0.1.0"
description = "Feature-oriented end-to-end test framework with environments, setup/teardown hooks and label filters"
requires-python = ">=3.10"
dependencies = []
keywords = ["testing", "e2e", "features", "assessments", "test-environment"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["featureflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
