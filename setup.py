import os.path

from setuptools import find_packages, setup


def read(rel_path):
    here = os.path.abspath(os.path.dirname(__file__))
    with open(os.path.join(here, rel_path), "r") as fp:
        return fp.read()


def get_version(rel_path):
    for line in read(rel_path).splitlines():
        if line.startswith("__version__"):
            delim = '"' if '"' in line else "'"
            return line.split(delim)[1]
    else:
        raise RuntimeError("Unable to find version string.")


def get_long_description():
    with open("README.md", "r") as f:
        text = f.read()
    return text


_install_requires = [
    "pyparsing>=3.0.0",
    "rich>=12.0.0",
]

setup(
    name="kconfig-tree",
    version=get_version("kconftree/__init__.py"),
    author="Espressif Systems",
    author_email="",
    description="Parser turning a multi-file Kconfig source tree into an entry tree",
    long_description_content_type="text/markdown",
    long_description=get_long_description(),
    url="https://github.com/espressif/esp-idf-kconfig",
    packages=find_packages(exclude=["test", "test.*"]),
    python_requires=">=3.7",
    install_requires=_install_requires,
    extras_require={
        "dev": [
            "flake8>=3.2.0",
            "flake8-import-order",
            "black",
            "pre-commit",
            "pytest",
        ],
    },
    keywords=["kconfig", "parser", "configuration", "build system"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Natural Language :: English",
        "Environment :: Console",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.7",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: POSIX",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: MacOS :: MacOS X",
    ],
)
