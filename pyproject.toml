[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "icapeg"
version = "0.1.0"
description = "ICAP message building and parsing, and ICAP service configuration"
requires-python = ">=3.11"
dependencies = []
keywords = ["icap", "http", "proxy", "content-adaptation", "rfc3507"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["icapeg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
