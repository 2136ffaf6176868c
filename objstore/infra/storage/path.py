"""Object key and URL helpers.

Uploaded objects live in a two-level namespace: the object ID groups related
files and the key names a file inside that group.

Example:
    ```python
    build_object_key("invoice-42", "scan.pdf")
    # Returns: invoice-42/scan.pdf

    split_object_key("invoice-42/scan.pdf")
    # Returns: ("invoice-42", "scan.pdf")

    normalize_url("https://s3.example.com/bucket/invoice-42/scan.pdf?X-Amz-Signature=abc")
    # Returns: https://s3.example.com/bucket/invoice-42/scan.pdf
    ```
"""

from __future__ import annotations


def build_object_key(object_id: str, key: str) -> str:
    """Build the composite key an upload is stored under.

    The result is exactly ``object_id + "/" + key``; neither part is
    sanitized or stripped.

    Args:
        object_id: Logical group the object belongs to.
        key: File name within the group.

    Returns:
        Composite object key.
    """
    return f"{object_id}/{key}"


def split_object_key(object_key: str) -> tuple[str, str]:
    """Split a composite key back into ``(object_id, key)``.

    Splits on the first ``/``. Keys without a separator return an empty
    object ID.
    """
    object_id, sep, key = object_key.partition("/")
    if not sep:
        return "", object_key
    return object_id, key


def normalize_url(url: str) -> str:
    """Strip the query string and fragment from a URL.

    Truncates at the first ``?`` or ``#``. The remaining scheme, host and
    path of a presigned URL are stable for a given bucket, endpoint and key
    while the signature query changes on every signing.

    Args:
        url: URL to normalize.

    Returns:
        The URL up to (not including) the first ``?`` or ``#``, or the URL
        unchanged when it contains neither.
    """
    for index, char in enumerate(url):
        if char in "?#":
            return url[:index]
    return url
