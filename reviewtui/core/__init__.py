# reviewtui/core/__init__.py
