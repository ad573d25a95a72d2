[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pullpiri"
version = "0.1.0"
description = "DDS type generation from IDL files and scenario-driven workload orchestration for vehicle service nodes"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "dds",
    "idl",
    "code-generation",
    "orchestration",
    "workload",
    "scenario",
    "systemd",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
pullpiri-dds-build = "pullpiri.build:main"

[tool.hatch.build.targets.wheel]
packages = ["pullpiri"]

[tool.hatch.build.targets.sdist]
include = [
    "pullpiri",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
