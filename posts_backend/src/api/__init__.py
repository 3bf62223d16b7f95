"""
FastAPI Posts Backend package.

The application instance lives in `src.api.main` (`app`, or `create_app()` to
build one around a specific post store).
"""
