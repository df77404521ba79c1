"""REST blueprints mounted under /api."""
