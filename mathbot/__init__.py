"""Telegram front-end for the Math.js evaluation API."""
