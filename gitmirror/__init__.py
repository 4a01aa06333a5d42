"""
gitmirror — Keep git repositories mirrored across hosting platforms.

A source repository is reconciled with its remote, then its branches are
pushed to every mirror repository that shares its path on another platform.
"""

__version__ = "0.4.0"
