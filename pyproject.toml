[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pandax"
version = "0.1.0"
description = "Admin back-end services on Flask and SQLite: cron jobs, audit logs, mail and object-storage settings, work-flow categories and CRUD column settings."
requires-python = ">=3.10"
keywords = ["admin", "crud", "code-generation", "cron", "scheduler", "flask", "audit-log", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Framework :: Flask",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Software Development :: Code Generators",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pandax"]

[tool.hatch.build.targets.sdist]
include = ["pandax", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
