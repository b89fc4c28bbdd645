from app.services.cloudconvert_client import CloudConvertClient, CloudConvertConfig
from app.services.orchestrator import ConversionOrchestrator, extract_result

__all__ = [
    "CloudConvertClient",
    "CloudConvertConfig",
    "ConversionOrchestrator",
    "extract_result",
]
