#!/usr/bin/env python3
"""
Script to generate business cards from a PowerPoint template and employee records.
This is a thin wrapper around the bizcard_pptx package.
"""

import sys
from bizcard_pptx.cli import main

if __name__ == '__main__':
    sys.exit(main())
