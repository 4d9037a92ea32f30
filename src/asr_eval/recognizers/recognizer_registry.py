from logging import getLogger
from typing import Dict, Optional, Type

from asr_eval.recognizers.mock_recognizer import MockRecognizer
from asr_eval.recognizers.recognizer_base import RecognizerBase
from asr_eval.recognizers.vendor_config import VendorConfig
from asr_eval.utils.errors import RecognizerNotFoundError

_log = getLogger(__name__)

# Registry mapping vendor types to their recognizer classes
recognizer_registry: Dict[str, Type[RecognizerBase]] = {
    MockRecognizer.vendor_type: MockRecognizer,
}


def register_recognizer(
    vendor_type: str, recognizer_class: Optional[Type[RecognizerBase]] = None
):
    """Register a recognizer class for a vendor type.

    Called with only the vendor type it returns a class decorator:

        @register_recognizer("google")
        class GoogleRecognizer(RecognizerBase): ...
    """
    vendor_type = vendor_type.strip().lower()

    def _decorator(cls: Type[RecognizerBase]) -> Type[RecognizerBase]:
        if vendor_type in recognizer_registry:
            _log.warning(
                f"Overriding recognizer for '{vendor_type}': "
                f"{recognizer_registry[vendor_type].__name__} -> {cls.__name__}"
            )
        recognizer_registry[vendor_type] = cls
        return cls

    if recognizer_class is None:
        return _decorator
    return _decorator(recognizer_class)


def get_recognizer(vendor: VendorConfig) -> RecognizerBase:
    """Instantiate the recognizer registered for ``vendor.vendor_type``.

    Raises:
        RecognizerNotFoundError: if nothing is registered for the vendor type
    """
    recognizer_class = recognizer_registry.get(vendor.vendor_type)
    if recognizer_class is None:
        raise RecognizerNotFoundError(vendor.vendor_type, list(recognizer_registry))
    _log.debug(
        f"Selected {recognizer_class.__name__} for vendor '{vendor.name}' "
        f"(type '{vendor.vendor_type}')"
    )
    return recognizer_class()
