"""Tests for masking sensitive configuration values."""

from gs_write.redact import MASK_TEXT, is_sensitive_key, redact


class TestRedact:
    """Test recursive redaction."""

    def test_sensitive_keys(self):
        """Should match keywords case-insensitively as substrings."""
        assert is_sensitive_key("client_secret")
        assert is_sensitive_key("Refresh_Token")
        assert is_sensitive_key("DB_PASSWORD")
        assert is_sensitive_key("myApiKey")
        assert not is_sensitive_key("client_id")
        assert not is_sensitive_key("header_row")

    def test_flat(self):
        """Should mask only sensitive values."""
        tree = {"client_id": "abc", "client_secret": "xyz", "rows": 1}
        assert redact(tree) == {"client_id": "abc", "client_secret": MASK_TEXT, "rows": 1}

    def test_nested(self):
        """Should recurse into nested mappings."""
        tree = {"auth": {"client_id": "abc", "access_token": "t", "expiry": None}}
        assert redact(tree) == {
            "auth": {"client_id": "abc", "access_token": MASK_TEXT, "expiry": None}
        }

    def test_sensitive_key_masks_whole_subtree(self):
        """Should mask a nested mapping under a sensitive key."""
        tree = {"credentials": {"client_id": "abc"}, "freeze": {"rows": 1}}
        assert redact(tree) == {"credentials": MASK_TEXT, "freeze": {"rows": 1}}

    def test_lists(self):
        """Should recurse into lists of mappings."""
        tree = {"accounts": [{"name": "a", "password": "p"}], "scopes": ["x", "y"]}
        assert redact(tree) == {
            "accounts": [{"name": "a", "password": MASK_TEXT}],
            "scopes": ["x", "y"],
        }

    def test_input_unchanged(self):
        """Should not modify the input tree."""
        tree = {"auth": {"secret": "s"}}
        redact(tree)
        assert tree == {"auth": {"secret": "s"}}
