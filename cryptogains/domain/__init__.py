# cryptogains/domain/__init__.py
