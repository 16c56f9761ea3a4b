[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metalanalyzer"
version = "0.1.5"
description = "Editor tooling building blocks for Metal shader sources: symbol index, include graph, clang-format integration and compiler diagnostic filtering"
requires-python = ">=3.10"
dependencies = []
keywords = ["lsp", "metal", "shader", "gpu", "language-server", "diagnostics", "clang-format"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Editors :: Integrated Development Environments (IDE)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["metalanalyzer"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
