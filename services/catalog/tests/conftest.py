# services/catalog/tests/conftest.py
"""
Shared test configuration and fixtures for catalog service tests.
"""

import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


# Configure Python path for testing
def setup_python_path():
    """Set up Python path to allow imports from both service and shared libs."""
    project_root = Path(__file__).parent.parent.parent.parent.absolute()
    catalog_src = Path(__file__).parent.parent / "src"
    tests_dir = Path(__file__).parent
    libs_path = project_root / "libs"

    paths_to_add = [str(catalog_src), str(libs_path), str(project_root), str(tests_dir)]
    for path in paths_to_add:
        if path not in sys.path:
            sys.path.insert(0, path)


# Set up paths immediately when module is imported
setup_python_path()

from catalog.auth import InvalidSessionError, SessionVerifierInterface  # noqa: E402
from catalog.interfaces import (  # noqa: E402
    FavoritesStoreInterface,
    ProductStoreInterface,
    RawDoc,
)
from fixtures.sample_documents import SAMPLE_DOCUMENTS  # noqa: E402


_YEAR_RE = re.compile(r"\b(\d{4})\b")


def _publication_year(doc: RawDoc) -> Optional[int]:
    """Rough stand-in for the store-side year expression: last 4-digit number."""
    found = _YEAR_RE.findall(str(doc.get("Publication date") or ""))
    return int(found[-1]) if found else None


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    os.environ["PYTEST_CURRENT_TEST"] = "true"
    os.environ["TESTING"] = "true"


class FakeProductStore(ProductStoreInterface):
    """
    In-memory product store.

    Index and fallback results are canned rather than evaluated, except for
    the year ``$match`` the index path applies before its limit. Every call
    is recorded so tests can assert which path ran with which query.
    """

    def __init__(
        self,
        docs: Optional[List[RawDoc]] = None,
        search_results: Optional[List[RawDoc]] = None,
        find_results: Optional[List[RawDoc]] = None,
        meta: Optional[RawDoc] = None,
        group_rows: Optional[Dict[str, List[RawDoc]]] = None,
    ):
        self.docs = list(SAMPLE_DOCUMENTS if docs is None else docs)
        self.search_results = search_results
        self.find_results = find_results
        self.meta = meta
        self.group_rows = group_rows or {}

        self.search_error: Optional[Exception] = None
        self.find_error: Optional[Exception] = None
        self.meta_error: Optional[Exception] = None
        self.aggregate_error: Optional[Exception] = None
        self.healthy = True

        self.search_calls: List[Dict[str, Any]] = []
        self.find_calls: List[Dict[str, Any]] = []
        self.find_one_calls: List[Dict[str, Any]] = []
        self.meta_calls: List[Dict[str, Any]] = []
        self.aggregate_calls: List[List[Dict[str, Any]]] = []

    def search(self, search_stage, limit, post_match=None):
        self.search_calls.append(
            {"stage": search_stage, "limit": limit, "post_match": post_match}
        )
        if self.search_error:
            raise self.search_error
        results = self.docs if self.search_results is None else self.search_results
        if post_match:
            years = post_match["$expr"]["$in"][1]
            results = [doc for doc in results if _publication_year(doc) in years]
        return list(results[:limit])

    def find(self, match, limit=None):
        self.find_calls.append(match)
        if self.find_error:
            raise self.find_error
        results = self.docs if self.find_results is None else self.find_results
        return list(results if limit is None else results[:limit])

    def find_one(self, query):
        self.find_one_calls.append(query)
        (key, value), = query.items()
        for doc in self.docs:
            if key in doc and doc[key] == value:
                return doc
        return None

    def search_meta(self, search_meta_stage):
        self.meta_calls.append(search_meta_stage)
        if self.meta_error:
            raise self.meta_error
        return self.meta

    def aggregate(self, pipeline):
        self.aggregate_calls.append(pipeline)
        if self.aggregate_error:
            raise self.aggregate_error
        group = next(stage["$group"] for stage in pipeline if "$group" in stage)
        key = group["_id"]
        if isinstance(key, dict):
            key = key["$ifNull"][0]
        return list(self.group_rows.get(key, []))

    def count(self):
        return len(self.docs)

    def health_check(self):
        return self.healthy


class FakeFavoritesStore(FavoritesStoreInterface):
    def __init__(self):
        self.pairs: List[tuple] = []

    def list_product_ids(self, user_id):
        return [product_id for uid, product_id in self.pairs if uid == user_id]

    def exists(self, user_id, product_id):
        return (user_id, product_id) in self.pairs

    def upsert(self, user_id, product_id):
        if (user_id, product_id) not in self.pairs:
            self.pairs.append((user_id, product_id))

    def delete(self, user_id, product_id):
        if (user_id, product_id) in self.pairs:
            self.pairs.remove((user_id, product_id))


class FakeSessionVerifier(SessionVerifierInterface):
    def __init__(self, sessions: Optional[Dict[str, str]] = None):
        self.sessions = sessions or {"valid-session": "user-1"}

    def verify(self, credential):
        if credential not in self.sessions:
            raise InvalidSessionError("unknown session")
        return self.sessions[credential]


@pytest.fixture
def product_store():
    return FakeProductStore()


@pytest.fixture
def favorites_store():
    return FakeFavoritesStore()


@pytest.fixture
def session_verifier():
    return FakeSessionVerifier()


@pytest.fixture
def test_client(product_store, favorites_store, session_verifier):
    """Create test client with fake stores installed on app.state."""
    from fastapi.testclient import TestClient

    from catalog.app import app
    from catalog.services import FacetService, FavoritesService, ProductSearchService

    app.state.search_service = ProductSearchService(store=product_store)
    app.state.facet_service = FacetService(store=product_store)
    app.state.favorites_service = FavoritesService(store=favorites_store)
    app.state.session_verifier = session_verifier

    return TestClient(app)
