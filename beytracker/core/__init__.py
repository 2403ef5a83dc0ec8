"""Constants and helpers shared by the beytracker blueprints."""
