"""Static scan configuration shared by the catalog packages."""
