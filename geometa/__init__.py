"""GeoGuessr meta hints: browse, search, contribute and quiz."""
