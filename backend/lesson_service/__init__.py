"""Lessons backend: a FastAPI/SQLModel store for language lessons and quiz questions."""
