"""Date and validation helpers shared by the parser and the collection."""
