"""Kernel – error taxonomy, clock port and value previews."""
