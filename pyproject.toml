[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ssrcore"
version = "0.1.0"
description = "Core building blocks of a ShadowsocksR-style proxy: HTTP obfuscation, rule matching, network helpers, a JSON reader and DNS resolution."
requires-python = ">=3.10"
keywords = ["proxy", "obfuscation", "shadowsocksr", "http", "dns", "json"]
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
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "dnspython",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["ssrcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
