[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvtools"
version = "0.1.0"
description = "User tools and memory models of a small RISC-V teaching operating system: Sv39 page tables, ELF headers, a free-list heap, a shell parser, grep and file utilities."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "risc-v",
    "sv39",
    "page-table",
    "elf",
    "malloc",
    "shell",
    "grep",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-grep = "xvtools.grep:main"
xv-cat = "xvtools.commands:cat_main"
xv-echo = "xvtools.commands:echo_main"
xv-wc = "xvtools.commands:wc_main"
xv-ls = "xvtools.commands:ls_main"
xv-kill = "xvtools.commands:kill_main"
xv-ln = "xvtools.commands:ln_main"
xv-mkdir = "xvtools.commands:mkdir_main"
xv-rm = "xvtools.commands:rm_main"

[tool.hatch.build.targets.wheel]
packages = ["xvtools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
