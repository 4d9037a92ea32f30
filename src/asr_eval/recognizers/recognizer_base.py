from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from asr_eval.recognizers.vendor_config import VendorConfig
from asr_eval.utils.evaluation_result import RecognitionResponse


class RecognizerBase(ABC):
    """A speech-to-text capability for one kind of vendor.

    Implementations raise :class:`asr_eval.utils.errors.RecognitionError` when
    the vendor cannot produce a transcript. Any other exception is treated the
    same way by the evaluation runner.
    """

    vendor_type: str

    @abstractmethod
    def recognize(
        self,
        audio_ref: str,
        language_code: Optional[str],
        parameters: Dict[str, Any],
        vendor: VendorConfig,
    ) -> RecognitionResponse:
        pass
