# safecheck/__init__.py
# SafeCheck: dead-man's-switch check-in monitor (timer + Telegram alerts)

__version__ = "0.1.0"
