#!/usr/bin/env python
"""Entry point for running the HTTP server."""

import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from events_api.__main__ import main


if __name__ == "__main__":
    main()
