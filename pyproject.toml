[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "microhttp"
version = "0.2.0"
description = "A small select-based HTTP/1.x server with event callbacks and a static file handler"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "static-files", "select", "sockets"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
microhttp = "microhttp.app:main"

[tool.hatch.build.targets.wheel]
packages = ["microhttp"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
