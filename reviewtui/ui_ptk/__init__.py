# reviewtui/ui_ptk/__init__.py
