"""AppForge - describe an app, get a generated project"""

__version__ = "1.0.0"
