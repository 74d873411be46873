"""HTTP route modules for the genmedia proxy."""
