"""Payment completion intake."""
