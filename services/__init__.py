"""
services — vendor resource APIs behind the authenticated executor.

Each service validates every upstream payload before returning it.
"""
