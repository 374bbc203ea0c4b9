[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "synctrie"
version = "0.1.0"
description = "A Merkle sync trie over byte keys with BLAKE3-20 node hashes, written through transaction batches to an in-memory store"
requires-python = ">=3.10"
dependencies = []
keywords = ["merkle", "trie", "sync", "blake3", "key-value"]
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
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["synctrie"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
