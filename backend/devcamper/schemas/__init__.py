"""
Pydantic request/response schemas (the API contract).

Request models validate bodies before any service runs; response models
serialize ORM objects with from_attributes. Relationship data (populated
courses / bootcamp summaries) is attached by the query helper, never read
lazily from the ORM.
"""
