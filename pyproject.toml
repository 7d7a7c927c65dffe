[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aiozipstream"
version = "0.1.0"
description = "Asynchronous ZIP archive reading and writing with a focus on streaming."
requires-python = ">=3.10"
keywords = ["zip", "archive", "asyncio", "compression", "streaming", "deflate", "zstd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: AsyncIO",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Archiving :: Compression",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "zstandard",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
aiozipstream-extract = "aiozipstream.extract:main"
aiozipstream-compress = "aiozipstream.compress_cli:main"

[tool.hatch.build.targets.wheel]
packages = ["aiozipstream"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
