"""Unit tests for the base application exception."""

from objstore.core.exceptions import AppException


class TestAppException:
    def test_default_title_from_status(self):
        error = AppException(status_code=503, detail="S3 unavailable")

        assert error.title == "Service Unavailable"
        assert error.type == "about:blank"
        assert str(error) == "S3 unavailable"

    def test_unknown_status_title(self):
        assert AppException(status_code=418, detail="teapot").title == "Error"

    def test_to_dict_includes_extra(self):
        error = AppException(
            status_code=404,
            detail="Object not found",
            type="object-not-found",
            instance="/objects/reports/q1.pdf",
            extra={"key": "reports/q1.pdf"},
        )

        assert error.to_dict() == {
            "type": "object-not-found",
            "title": "Not Found",
            "status": 404,
            "detail": "Object not found",
            "instance": "/objects/reports/q1.pdf",
            "key": "reports/q1.pdf",
        }
