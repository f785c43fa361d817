"""Inkwell: a small blogging application on a managed backend."""
