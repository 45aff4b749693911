[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nutanixinfra"
version = "0.1.0"
description = "Typed resource models for Nutanix cluster infrastructure: clusters, machines, templates and conditions."
requires-python = ">=3.10"
dependencies = []
keywords = ["nutanix", "cluster-api", "kubernetes", "infrastructure", "prism-central"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nutanixinfra"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
