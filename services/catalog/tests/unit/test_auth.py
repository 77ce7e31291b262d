# services/catalog/tests/unit/test_auth.py

import pytest
from conftest import FakeSessionVerifier

from catalog.auth import resolve_user_id


@pytest.mark.unit
class TestResolveUserId:
    def test_valid_session(self):
        assert resolve_user_id("valid-session", FakeSessionVerifier()) == "user-1"

    def test_invalid_session_is_anonymous(self):
        assert resolve_user_id("forged", FakeSessionVerifier()) is None

    @pytest.mark.parametrize("credential", [None, ""])
    def test_missing_cookie_is_anonymous(self, credential):
        assert resolve_user_id(credential, FakeSessionVerifier()) is None

    def test_no_verifier_installed_is_anonymous(self):
        assert resolve_user_id("valid-session", None) is None


@pytest.mark.unit
def test_config_defaults(monkeypatch):
    from catalog.config import CatalogConfig

    for var in ("SEARCH_RESULT_LIMIT", "FACET_BUCKET_LIMIT", "MONGODB_DB_NAME"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("MONGODB_ATLAS_SEARCH_INDEX", "books")

    settings = CatalogConfig(_env_file=None)

    assert settings.search_result_limit == 60
    assert settings.facet_bucket_limit == 20
    assert settings.mongodb_db_name == "ic4302"
    assert settings.mongodb_atlas_search_index == "books"
    assert settings.fallback_on_empty_primary is True
