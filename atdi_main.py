#!/usr/bin/env python3
import sys
import os

# Add the project directory to the Python path to recognize the 'atdi' package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from atdi.main import main

if __name__ == "__main__":
    sys.exit(main())
