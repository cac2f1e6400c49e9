"""Generic resource query engine: filterable, sortable, paginated list queries."""
