[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tundragraph"
version = "0.1.0"
description = "In-memory graph storage primitives: an edge store with versioned table snapshots, columnar tables and row merging for graph queries"
requires-python = ">=3.10"
dependencies = []
keywords = ["graph", "database", "edges", "columnar", "in-memory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tundragraph"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
