"""SocialHub FastAPI backend package."""
