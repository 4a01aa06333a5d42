"""
CLI command modules, registered on the group in gitmirror.main.
"""
