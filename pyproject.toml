[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zappkit"
version = "0.1.0"
description = "Building blocks for application frameworks: compactors, serializers, rolling log files, structured logging, dependency-ordered startup and creator registries."
requires-python = ">=3.10"
keywords = ["framework", "logging", "serializer", "compression", "rolling-log", "plugins"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: System :: Logging",
    "Topic :: System :: Archiving :: Compression",
]
dependencies = [
    "msgpack",
    "pyyaml",
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["zappkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
