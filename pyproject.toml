[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fuzzyfind"
version = "0.57.0"
description = "Fuzzy matching, scoring and ANSI colour extraction for interactive line filters"
requires-python = ">=3.10"
keywords = ["fuzzy", "matching", "search", "filter", "ansi", "smith-waterman"]
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
    "Topic :: Text Processing :: Filters",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fuzzyfind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
