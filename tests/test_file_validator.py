"""변환 허용 정책 테스트"""

import pytest

from app.core.config import DEFAULT_BANNED_MIME_TYPES, DEFAULT_CONVERSION_MAP
from app.core.exceptions import TargetNotAllowedException, UnsupportedFileTypeException
from app.utils import ConversionPolicy, normalize_mime


@pytest.fixture
def policy() -> ConversionPolicy:
    return ConversionPolicy.from_mapping(DEFAULT_CONVERSION_MAP, DEFAULT_BANNED_MIME_TYPES)


class TestValidate:
    @pytest.mark.parametrize(
        "mime", ["video/mp4", "application/zip", "application/x-msdownload", ""]
    )
    def test_unknown_type_rejects_every_target(self, policy, mime):
        """허용 목록에 없는 타입은 어떤 대상도 불가"""
        targets = {t for targets in DEFAULT_CONVERSION_MAP.values() for t in targets}
        assert not any(policy.validate(mime, t) for t in targets)

    def test_listed_pairs_allowed_in_any_case(self, policy):
        """허용 쌍은 대소문자와 무관하게 허용"""
        for mime, targets in DEFAULT_CONVERSION_MAP.items():
            for target in targets:
                assert policy.validate(mime, target)
                assert policy.validate(mime, target.upper())

    def test_unlisted_target(self, policy):
        assert not policy.validate("image/png", "mp4")
        assert not policy.validate("text/plain", "docx")

    def test_mime_parameters_ignored(self, policy):
        assert policy.validate("text/plain; charset=utf-8", "pdf")
        assert policy.validate("IMAGE/PNG", "jpg")

    def test_injected_table(self):
        """최소 테이블로 교체 가능"""
        minimal = ConversionPolicy.from_mapping({"text/csv": ["XLSX"]})

        assert minimal.validate("text/csv", "xlsx")
        assert not minimal.validate("application/pdf", "docx")
        assert minimal.supported_types() == ["text/csv"]
        assert not minimal.is_banned("application/x-sh")


class TestEnsureAllowed:
    def test_unsupported_type_lists_supported(self, policy):
        with pytest.raises(UnsupportedFileTypeException) as exc_info:
            policy.ensure_allowed("video/mp4", "pdf")

        assert exc_info.value.status_code == 400
        assert exc_info.value.details["receivedMime"] == "video/mp4"
        assert exc_info.value.details["supportedMimes"] == list(DEFAULT_CONVERSION_MAP)

    def test_target_not_allowed_lists_allowed(self, policy):
        with pytest.raises(TargetNotAllowedException) as exc_info:
            policy.ensure_allowed("image/png", "mp4")

        assert exc_info.value.details == {
            "sourceMime": "image/png",
            "allowedTargets": ["jpg", "webp", "pdf", "png"],
        }

    def test_allowed(self, policy):
        policy.ensure_allowed("application/pdf", "DOCX")


class TestBanned:
    @pytest.mark.parametrize("mime", DEFAULT_BANNED_MIME_TYPES)
    def test_executables_banned(self, policy, mime):
        assert policy.is_banned(mime)

    def test_documents_not_banned(self, policy):
        assert not policy.is_banned("application/pdf")


def test_normalize_mime():
    assert normalize_mime(" Text/Plain ; charset=UTF-8") == "text/plain"
    assert normalize_mime(None) == ""
