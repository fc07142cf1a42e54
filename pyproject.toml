[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nodeflow"
version = "0.1.0"
description = "A headless node-graph model: nodes, ports, connections, styles, scene serialization and behaviour-tree node models read from XML."
requires-python = ">=3.10"
dependencies = []
keywords = ["node-editor", "dataflow", "graph", "behavior-tree", "scene"]
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
    "Topic :: Software Development :: User Interfaces",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nodeflow"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
