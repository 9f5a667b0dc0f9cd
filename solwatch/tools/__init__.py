"""
Command-line tools.

Each module is runnable with `python -m solwatch.tools.<name>` and exposes main().
"""
