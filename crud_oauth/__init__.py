"""CRUD backend with local and Google authentication."""
