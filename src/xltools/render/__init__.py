"""Result renderers: markdown tables, TOON text, truncation."""
