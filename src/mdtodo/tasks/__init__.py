"""Task records: file format, storage layout, lifecycle and archive upkeep."""
