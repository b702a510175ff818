"""Click commands and console rendering."""
