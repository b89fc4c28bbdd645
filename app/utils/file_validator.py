from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from app.core.exceptions import TargetNotAllowedException, UnsupportedFileTypeException


def normalize_mime(content_type: Optional[str]) -> str:
    """
    MIME 타입 정규화

    - 파라미터 제거 (예: '; charset=utf-8')
    - 소문자 변환
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def normalize_target(target: Optional[str]) -> str:
    """대상 포맷 정규화 (공백 제거, 소문자)"""
    return (target or "").strip().lower()


@dataclass(frozen=True)
class ConversionPolicy:
    """
    업로드 변환 허용 정책 (읽기 전용)

    - 소스 MIME 타입별 허용 대상 포맷
    - 차단된 MIME 타입 (실행 파일 등)
    """

    conversion_map: Mapping[str, Tuple[str, ...]]
    banned_mime_types: frozenset = field(default_factory=frozenset)

    @classmethod
    def from_mapping(
        cls,
        conversion_map: Mapping[str, Iterable[str]],
        banned_mime_types: Iterable[str] = (),
    ) -> "ConversionPolicy":
        table = {
            normalize_mime(mime): tuple(normalize_target(t) for t in targets)
            for mime, targets in conversion_map.items()
        }
        return cls(
            conversion_map=MappingProxyType(table),
            banned_mime_types=frozenset(normalize_mime(m) for m in banned_mime_types),
        )

    def is_banned(self, content_type: Optional[str]) -> bool:
        return normalize_mime(content_type) in self.banned_mime_types

    def is_supported(self, content_type: Optional[str]) -> bool:
        return normalize_mime(content_type) in self.conversion_map

    def supported_types(self) -> List[str]:
        return list(self.conversion_map.keys())

    def allowed_targets(self, content_type: Optional[str]) -> List[str]:
        return list(self.conversion_map.get(normalize_mime(content_type), ()))

    def validate(self, content_type: Optional[str], target_format: Optional[str]) -> bool:
        """
        변환 허용 여부 확인

        Args:
            content_type: 업로드 파일의 MIME 타입
            target_format: 대상 포맷 (대소문자 무시)

        Returns:
            허용 목록에 있으면 True
        """
        allowed = self.conversion_map.get(normalize_mime(content_type))
        if allowed is None:
            return False
        return normalize_target(target_format) in allowed

    def ensure_allowed(self, content_type: Optional[str], target_format: Optional[str]) -> None:
        """
        변환 허용 검증

        Raises:
            UnsupportedFileTypeException: 지원하지 않는 소스 타입
            TargetNotAllowedException: 소스 타입에 허용되지 않는 대상 포맷
        """
        if not self.is_supported(content_type):
            raise UnsupportedFileTypeException(
                mime=content_type or "", supported=self.supported_types()
            )
        if not self.validate(content_type, target_format):
            raise TargetNotAllowedException(
                mime=content_type or "", allowed=self.allowed_targets(content_type)
            )
