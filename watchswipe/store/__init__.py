"""
Document store boundary.

Responsibilities:
- Hold the ``watches`` catalog and per-user ``users`` profile collections.
- Answer equality-filtered queries and fetch documents.
- Apply create-or-replace, partial and atomic array-append/remove updates.
"""
