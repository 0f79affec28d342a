#!/usr/bin/env python3
"""
Setup script for VKey
"""

from setuptools import setup, find_packages
import os
import sys

HERE = os.path.dirname(os.path.abspath(__file__))

# Import the version
sys.path.insert(0, HERE)
from vkey.__version__ import __version__


def read_file(filename):
    with open(os.path.join(HERE, filename), encoding='utf-8') as f:
        return f.read()


setup(
    name='vkey',
    version=__version__,
    description='Vietnamese input method for Linux (Telex, VNI, VIQR)',
    long_description=read_file('README.md'),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.9',
    install_requires=[
        'evdev',         # Keyboard events from /dev/input, uinput backspaces
        'python-xlib',   # Focused window (per-application context)
    ],
    extras_require={
        'dev': [
            'pytest>=7.0',
            'pytest-cov',
            'pytest-timeout',
        ],
    },
    entry_points={
        'console_scripts': [
            'vkey=vkey.cli:main',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: End Users/Desktop',
        'Natural Language :: Vietnamese',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Operating System :: POSIX :: Linux',
        'Environment :: X11 Applications',
        'Topic :: Text Processing :: Linguistic',
    ],
)
