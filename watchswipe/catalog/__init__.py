"""
Watch catalog.

Responsibilities:
- Load the bundled watch catalog CSV into an in-memory DataFrame.
- Seed the ``watches`` collection of the document store.
- Fetch the full catalog as the starting swipe pool.
- Search watches by name or brand for the onboarding questionnaire.
"""
