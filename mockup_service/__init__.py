"""
Product mockup preview microservice package.

Exposes reusable primitives for removing artwork backgrounds, compositing
artwork onto product mockups, and serving the FastAPI application.
"""
