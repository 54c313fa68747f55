[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sszmerkle"
version = "0.1.0"
description = "SimpleSerialize (SSZ) encoding helpers, Merkle hashing and Merkle proof verification"
requires-python = ">=3.10"
dependencies = []
keywords = ["ssz", "merkle", "merkleization", "serialization", "proof", "hash-tree-root"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["sszmerkle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
