[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "etapacc"
version = "0.1.0"
description = "Compiler building blocks for a small C-like language: token listing, syntax tree, symbol tables, ILOC and x86-64 assembly output"
requires-python = ">=3.10"
dependencies = []
keywords = ["compiler", "ast", "iloc", "symbol-table", "x86-64", "assembly", "code-generation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Compilers",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["etapacc"]

[tool.pytest.ini_options]
addopts = "-ra"
