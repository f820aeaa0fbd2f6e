"""
Worker-side modules. ``runner.py`` is executed as a script inside the sidecar process.
"""
