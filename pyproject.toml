[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "scenicwire"
version = "0.1.0"
description = "Script store, drawing-script decoder, lookup3 hashing and a linear hash table for Scenic scenes"
requires-python = ">=3.10"
dependencies = []
keywords = ["scenic", "vector graphics", "drawing script", "lookup3", "hashtable", "linear hashing"]
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
    "Topic :: Multimedia :: Graphics",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["scenicwire"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
