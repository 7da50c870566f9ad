# tools/__init__.py
"""データセット保守用のスクリプト群"""
__all__ = ["assign_icons"]
