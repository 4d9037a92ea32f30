import json
import time
from logging import getLogger
from typing import Any, Dict, Optional

from asr_eval.recognizers.recognizer_base import RecognizerBase
from asr_eval.recognizers.vendor_config import VendorConfig
from asr_eval.utils.errors import RecognitionError
from asr_eval.utils.evaluation_result import RecognitionResponse

ERROR_VENDOR_NAME = "MockASR-Error"


class MockRecognizer(RecognizerBase):
    """Offline recognizer for exercising the evaluation pipeline.

    Behaviour is driven by the vendor's ``other_configs``:

    - ``latency_ms``: simulated call duration (default 0)
    - ``transcripts``: map of audio ref to the exact transcript to return
    - ``simulate_error``: fail every call (also enabled by the vendor name
      ``MockASR-Error``)
    """

    vendor_type = "mock"

    def __init__(self):
        self._log = getLogger(__name__)

    def recognize(
        self,
        audio_ref: str,
        language_code: Optional[str],
        parameters: Dict[str, Any],
        vendor: VendorConfig,
    ) -> RecognitionResponse:
        self._log.debug(
            f"Mock recognize called for '{audio_ref}', "
            f"language '{language_code}', vendor '{vendor.name}'"
        )
        latency_ms = vendor.other_configs.get("latency_ms", 0)
        if latency_ms:
            time.sleep(latency_ms / 1000)

        if vendor.name == ERROR_VENDOR_NAME or vendor.other_configs.get(
            "simulate_error", False
        ):
            raw_payload = json.dumps(
                {"error": f"Simulated error from {vendor.name} vendor"}
            )
            raise RecognitionError(
                f"simulated error from {vendor.name} for file {audio_ref}",
                raw_payload=raw_payload,
            )

        transcripts = vendor.other_configs.get("transcripts", {})
        if audio_ref in transcripts:
            text = transcripts[audio_ref]
        else:
            text = (
                f"Mock recognition for {audio_ref}: "
                f"Hello world, this is a test for language {language_code}."
            )

        raw_payload = json.dumps(
            {"transcription": text, "confidence": 0.95, "simulated": True}
        )
        return RecognitionResponse(text=text, raw_payload=raw_payload)
