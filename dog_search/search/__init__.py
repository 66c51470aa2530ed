"""
Natural-language directory search.

Responsibilities:
- Interpret a free-text query (normalise, extract entities, classify intent).
- Resolve where the user wants to search (near me, a city, a ZIP, a state).
- Compile the interpretation into a typed predicate tree for the store.
- Retry with progressively looser matching and a wider radius.
- Attach distances and order results for API serialisation.
"""
