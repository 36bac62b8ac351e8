[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "halloc"
version = "0.1.0"
description = "A simulated boundary-tag heap allocator with an explicit free list and coalescing"
requires-python = ">=3.10"
dependencies = []
keywords = ["allocator", "heap", "malloc", "boundary-tags", "free-list", "coalescing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
halloc-bench = "halloc.bench:main"

[tool.hatch.build.targets.wheel]
packages = ["halloc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
