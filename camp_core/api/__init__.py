"""HTTP helpers shared by the Camp Core blueprints."""
