[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "omnethdb"
version = "0.1.0"
description = "Governed, versioned memory for agents: data model, write policy, runtime config, point-in-time exports and a JSON-RPC tool server."
requires-python = ">=3.11"
dependencies = []
keywords = [
    "memory",
    "agents",
    "lineage",
    "audit",
    "json-rpc",
    "mcp",
    "export",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["omnethdb"]

[tool.hatch.build.targets.sdist]
include = ["omnethdb", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
warn_redundant_casts = true
