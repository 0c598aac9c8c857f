#!/usr/bin/env python3
"""Convenience runner for the track log ingestion tool.

Usage:
    python run.py activities/ --output results.json
"""
import sys

from tracklog.main import main

if __name__ == "__main__":
    sys.exit(main())
