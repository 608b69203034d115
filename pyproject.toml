[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fireworq"
version = "1.0.0"
description = "A lightweight job queue library that dispatches jobs to HTTP workers."
requires-python = ">=3.10"
keywords = ["job queue", "dispatcher", "worker", "http", "background jobs"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fireworq-gendoc = "fireworq.gendoc:main"
fireworq-genauthors = "fireworq.genauthors:main"

[tool.hatch.build.targets.wheel]
packages = ["fireworq"]

[tool.pytest.ini_options]
addopts = "-ra"
