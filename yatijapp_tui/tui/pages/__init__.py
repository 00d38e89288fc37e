"""Page state kept apart from the Textual screens that draw it."""
