#!/usr/bin/env python
# encoding: utf-8

import os

from setuptools import setup, find_packages


# Utility function to read the README file.
# Used for the long_description.  It's nice, because now 1) we have a top level
# README file and 2) it's easier to type in the README file than to put a raw
# string in below ...
def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()

setup(
    name = "diffparse",
    version = "0.1.0",
    author = "Alexander Mollberg",
    author_email = "amollberg@users.noreply.github.com",
    description = ("Parse unified and git extended diffs into patches and hunks"),
    license = "Apache-2.0",
    keywords = "git diff patch unidiff parser",
    packages=find_packages(exclude=["tests"]),
    long_description=read('README.md'),
    long_description_content_type='text/markdown',
    python_requires='>=3.7',
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Version Control",
        "Environment :: Console",
        "Topic :: Utilities",
        "License :: OSI Approved :: Apache Software License",
    ],
    install_requires=["pygit2>=1.14.0",
                      "backports.shutil_get_terminal_size>=1.0.0"],
    tests_require=read("requirements-dev.txt").split(),
    extras_require={
        'test': read("requirements-dev.txt").split(),
    },
    entry_points={
        'console_scripts': ['diffparse=diffparse.main:main'],
    },
)
