#!/usr/bin/env python
"""
Quality gate CLI entry point.

Usage:
    python cli.py gate               # Evaluate the quality gate
    python cli.py report             # Generate the unified quality report
    python cli.py analyze            # Analyze code complexity
    python cli.py measure --build    # Measure build time
    python cli.py serve              # Run the admin API
"""

from qualitygate.cli.app import main

if __name__ == "__main__":
    main()
