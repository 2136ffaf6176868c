"""Unit tests for object key and URL helpers."""

import pytest

from objstore.infra.storage.path import build_object_key, normalize_url, split_object_key


class TestBuildObjectKey:
    def test_joins_with_slash(self):
        assert build_object_key("invoice-42", "scan.pdf") == "invoice-42/scan.pdf"

    @pytest.mark.parametrize(
        ("object_id", "key", "expected"),
        [
            ("", "scan.pdf", "/scan.pdf"),
            ("invoice-42", "", "invoice-42/"),
            ("a/b", "/c", "a/b//c"),
            (" id ", "name with spaces.txt", " id /name with spaces.txt"),
        ],
    )
    def test_parts_are_not_sanitized(self, object_id, key, expected):
        assert build_object_key(object_id, key) == expected


class TestSplitObjectKey:
    def test_splits_on_first_slash(self):
        assert split_object_key("invoice-42/scans/page1.png") == ("invoice-42", "scans/page1.png")

    def test_key_without_separator(self):
        assert split_object_key("scan.pdf") == ("", "scan.pdf")


class TestNormalizeURL:
    """Test query and fragment stripping."""

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://h/k?X=1#frag", "https://h/k"),
            ("https://h/k#frag?X=1", "https://h/k"),
            ("https://h/k", "https://h/k"),
            (
                "http://localhost:9000/bucket/invoice-42/scan.pdf?X-Amz-Signature=abc&X-Amz-Expires=900",
                "http://localhost:9000/bucket/invoice-42/scan.pdf",
            ),
            ("?only-query", ""),
            ("", ""),
        ],
    )
    def test_truncates_at_first_query_or_fragment(self, url, expected):
        assert normalize_url(url) == expected

    def test_differently_signed_urls_compare_equal(self):
        first = "https://s3.example.com/b/k.txt?X-Amz-Date=20260101T000000Z&X-Amz-Signature=aaa"
        second = "https://s3.example.com/b/k.txt?X-Amz-Date=20260101T000500Z&X-Amz-Signature=bbb"

        assert normalize_url(first) == normalize_url(second)
