"""harvey — compile Markdown slide decks into resolved slide records."""
