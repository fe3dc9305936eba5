"""HTTP surface of the document signing services."""
