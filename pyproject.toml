[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "actrun"
version = "0.1.0"
description = "Building blocks for running workflow jobs locally: expression rewriting, job pipelines, job logging, action reading and step helpers"
requires-python = ">=3.10"
keywords = ["workflow", "ci", "actions", "runner", "expressions"]
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
    "Topic :: Software Development :: Build Tools",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["actrun"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
