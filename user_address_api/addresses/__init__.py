"""Address feature: content-addressed address rows."""
