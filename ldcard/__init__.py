"""
Linked-data summary cards for articles.

This package contains the card pipeline components:

- Discovering and decoding JSON-LD blocks embedded in a page.
- Selecting the Article record and linking its author's Person record.
- Detecting the atproto namespace and normalising handle/DID fields.
- Resolving a missing author avatar through a cached adapter chain.
- Rendering the summary card into the page.
"""
