[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "edgehttp"
version = "0.6.0"
description = "HTTP/1.x header model, connection and body negotiation, and WebSocket upgrade helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "headers", "websocket", "upgrade", "keep-alive", "chunked"]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["edgehttp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
