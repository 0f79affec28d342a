#!/usr/bin/env python3
"""
VKey main entry point for running as a module: python3 -m vkey
"""

import sys
from vkey.cli import main

if __name__ == '__main__':
    sys.exit(main())
