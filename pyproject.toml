[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sivana"
version = "0.1.0"
description = "Audio fingerprinting: enroll WAV songs into a SQLite database and identify snippets by landmark hashes"
requires-python = ">=3.10"
keywords = ["audio", "fingerprint", "spectrogram", "music", "identification", "sqlite", "wav"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[project.scripts]
sivana = "sivana.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sivana"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
