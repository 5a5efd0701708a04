"""Preview and overlay rendering."""
