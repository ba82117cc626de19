"""Вспомогательные утилиты coinlist."""
