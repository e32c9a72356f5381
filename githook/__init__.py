"""
GitHook Controller.
"""
