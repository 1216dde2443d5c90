#!/usr/bin/env python3

import os
import re

from setuptools import setup

def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.read()

def version():
    match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", read("ecomm/__init__.py"), re.M)
    if not match:
        raise RuntimeError("failed to parse version")
    return match.group(1)

install_requires = [
    "aiosqlite >= 0.17.0",
    "iso8601 >= 1.0.2",
    "wrapt >= 1.13.3"
]

extras_require = {
    "test": [
        "pytest >= 7.0",
        "pytest-asyncio >= 0.21"
    ]
}

classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Topic :: Office/Business"
]

setup(
    name = "ecomm",
    version = version(),
    description = "Order and fulfillment services with filterable, cursor-paginated listing.",
    classifiers = classifiers,
    packages = ["ecomm"],
    python_requires = ">= 3.10",
    install_requires = install_requires,
    extras_require = extras_require,
    keywords = "order fulfillment pagination cursor"
)
