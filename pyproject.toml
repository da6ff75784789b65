[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "assistkit"
version = "0.1.0"
description = "Building blocks for a chat assistant: prompt templates, conversation memory, task storage, tools and a small web service."
requires-python = ">=3.10"
keywords = [
    "assistant",
    "chat",
    "prompt-template",
    "conversation-memory",
    "task-manager",
    "tools",
    "flask",
]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "python-dotenv",
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
assistkit-server = "assistkit.webapp:main"

[tool.hatch.build.targets.wheel]
packages = ["assistkit"]

[tool.hatch.build.targets.sdist]
include = [
    "assistkit",
    "tests",
    "README.md",
    "pyproject.toml",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
