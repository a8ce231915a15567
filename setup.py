#!/usr/bin/env python3

import os
import re

from setuptools import setup, find_packages

_here = os.path.dirname(os.path.realpath(__file__))


def get_version():
    """Pull the version from the package without importing it."""
    with open(os.path.join(_here, 'src', 'bzrpc', '__init__.py')) as f:
        return re.search(r"^__version__ = '([^']+)'", f.read(), re.M).group(1)


setup(
    name='bzrpc',
    version=get_version(),
    description='thin client library for the Bugzilla XML-RPC web service',
    license='BSD',
    platforms=['any'],
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.8',
    install_requires=[
        'lxml',
        'requests',
        'snakeoil',
    ],
    extras_require={
        'test': ['pytest', 'responses'],
    },
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3',
    ],
)
