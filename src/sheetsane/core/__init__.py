"""Core functionality: workbook model, reader, limits, scoring, pipeline, storage."""
