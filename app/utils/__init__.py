from app.utils.file_validator import (
    ConversionPolicy,
    normalize_mime,
    normalize_target,
)

__all__ = [
    "ConversionPolicy",
    "normalize_mime",
    "normalize_target",
]
