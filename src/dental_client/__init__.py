"""Client-side cache, session and resource hooks for the dental practice API."""
