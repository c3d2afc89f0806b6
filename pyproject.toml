[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fcgiclient"
version = "0.9.0"
description = "Asynchronous FastCGI client for talking to FastCGI application servers such as PHP-FPM."
requires-python = ">=3.10"
dependencies = []
keywords = ["fastcgi", "fcgi", "client", "asyncio", "php-fpm"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: AsyncIO",
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
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["fcgiclient"]

[tool.hatch.build.targets.sdist]
include = ["fcgiclient", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
files = ["fcgiclient"]
