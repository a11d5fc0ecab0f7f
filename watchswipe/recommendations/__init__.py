"""
Recommendation layer.

Responsibilities:
- Define the watch record shared by the catalog, the swipe deck and profiles.
- Tally style tags across a user's liked watches.
- Narrow the candidate pool to the user's two favourite styles.
"""
