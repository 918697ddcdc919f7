"""Services Layer — data-store queries and content drafting shared by route modules."""
