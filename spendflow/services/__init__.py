"""Domain services: approval engine, stores and supporting integrations."""
