#!/usr/bin/env python3
from setuptools import setup, find_packages
# To use a consistent encoding
from codecs import open
import os

here = os.path.abspath(os.path.dirname(__file__))

# Get the long description from the README file
with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='ziparchive',
    version='1.0.0',

    description='Reading and writing zip archives with pluggable compression',
    long_description=long_description,
    long_description_content_type='text/markdown',

    license='BSD',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Intended Audience :: Developers',
        'Topic :: System :: Archiving :: Compression',
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3',
    ],

    keywords='zip archive deflate',

    python_requires='>=3.7',
    packages=find_packages(exclude=['examples', 'tests']),
    install_requires=['aiofiles'],
    extras_require={
        'tests': ['pytest', 'pytest-asyncio'],
    },
    entry_points={
        'console_scripts': ['ziparchive=ziparchive.cli:main'],
    },
)
