# services/catalog/tests/fixtures/sample_documents.py
"""
Raw catalog documents shaped like the ingestion output.
"""

from bson import ObjectId

FOUNDATION_OID = ObjectId("6521f0c1e4b0a7d3c2f1a9b4")
DUNE_OID = ObjectId("6521f0c1e4b0a7d3c2f1a9b5")
ASIN_ONLY_OID = ObjectId("6521f0c1e4b0a7d3c2f1a9b6")

FOUNDATION = {
    "_id": FOUNDATION_OID,
    "id": "foundation-1951",
    "Title": "Foundation",
    "Description": "The first novel in the Foundation series.",
    "Publisher": "Spectra",
    "Language": "English",
    "Edition": "Reprint",
    "Publication date": "June 1, 2004",
    "Customer Reviews": "4.6 out of 5 stars, 21,834 ratings",
    "entities": ["Isaac Asimov", "Hari Seldon"],
    "price": 7.99,
    "ASIN": "B000FC1PJI",
}

DUNE = {
    "_id": DUNE_OID,
    "Title": "Dune",
    "Description": "Set on the desert planet Arrakis.",
    "Publisher": "Ace",
    "Language": "English",
    "Publication date": "August 2, 2005",
    "Customer Reviews": "4.7 out of 5 stars",
    "entities": [],
    "price": "9.99",
    "in_stock": False,
}

NO_PUBLISHER = {
    "_id": "legacy-string-id",
    "Title": "Anonymous Pamphlet",
    "Language": "Spanish",
    "Publication date": "not a date",
}

ASIN_ONLY = {
    "_id": ASIN_ONLY_OID,
    "Title": "Neuromancer",
    "Publisher": "Ace",
    "ASIN": "B000O76ON6",
    "Publication date": "July 1, 1984",
}

SAMPLE_DOCUMENTS = [FOUNDATION, DUNE, NO_PUBLISHER, ASIN_ONLY]
