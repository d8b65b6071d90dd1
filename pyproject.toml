[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hpccg"
version = "0.1.0"
description = "A small conjugate gradient benchmark on a 27-point stencil sparse matrix, with a mixed-precision variant"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["conjugate gradient", "sparse matrix", "benchmark", "linear solver", "mixed precision"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hpccg = "hpccg.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hpccg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
