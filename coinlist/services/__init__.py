"""Сервисный слой coinlist."""
