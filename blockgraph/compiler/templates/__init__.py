"""Bundled block templates. Importing a module registers its blocks."""
