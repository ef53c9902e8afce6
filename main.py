#!/usr/bin/env python3
"""
Main entry point for the distirc terminal client
"""

from distirc.cli import run

if __name__ == "__main__":
    run()
