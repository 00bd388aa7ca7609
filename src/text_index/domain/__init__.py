"""Domain layer: documents, query results and the error taxonomy."""
