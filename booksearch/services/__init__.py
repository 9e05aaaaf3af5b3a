"""Business services: ingestion pipeline, query layer, and the library facade."""
