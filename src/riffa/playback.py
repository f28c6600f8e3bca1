"""
Audio playback of decoded WAVE data implemented with sounddevice.

Exceptions from PortAudio are mapped to `AudioDeviceError` so callers can
react consistently.
"""

from __future__ import annotations

import logging

try:
    import sounddevice as sd
except OSError as exc:  # PortAudio shared library not installed
    sd = None
    _SOUNDDEVICE_ERROR: OSError | None = exc
else:
    _SOUNDDEVICE_ERROR = None

from .errors import AudioDeviceError
from .wave import AudioFormat, WaveFormat

logger = logging.getLogger(__name__)

# PCM WAVE stores 8-bit samples unsigned, wider samples signed.
_DTYPES = {
    8: "uint8",
    16: "int16",
    24: "int24",
    32: "int32",
}


def dtype_for(fmt: WaveFormat) -> str:
    if fmt.audio_format != AudioFormat.PCM:
        raise AudioDeviceError(f"Only PCM audio can be played (got format {fmt.audio_format}).")
    try:
        return _DTYPES[fmt.bits_per_sample]
    except KeyError:
        raise AudioDeviceError(f"Unsupported bit depth for playback: {fmt.bits_per_sample}") from None


class PlaybackEngine:
    """Streams PCM frames described by a `WaveFormat` to an output device."""

    def __init__(self, *, device: int | str | None = None, blocksize: int = 0) -> None:
        self._device = device
        self._blocksize = blocksize
        self._format: WaveFormat | None = None
        self._stream: sd.RawOutputStream | None = None

    def start(self, fmt: WaveFormat) -> None:
        """Open and start a RawOutputStream matching `fmt`."""
        if self._stream is not None:
            raise AudioDeviceError("PlaybackEngine already started.")
        if sd is None:
            raise AudioDeviceError(f"Audio output is unavailable: {_SOUNDDEVICE_ERROR}")

        dtype = dtype_for(fmt.validate())
        try:
            self._stream = sd.RawOutputStream(
                samplerate=fmt.sample_rate,
                channels=fmt.channels,
                dtype=dtype,
                blocksize=self._blocksize,
                device=self._device,
            )
            self._stream.start()
            self._format = fmt
            logger.debug(
                "PlaybackEngine started (format=%s, device=%s)",
                fmt.describe(),
                self._stream.device,
            )
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            self._stream = None
            logger.error("Failed to start audio stream: %s", exc)
            raise AudioDeviceError(str(exc)) from exc

    def submit(self, pcm: bytes) -> None:
        """Submit whole frames of PCM audio to the output device."""
        if self._stream is None or self._format is None:
            raise AudioDeviceError("PlaybackEngine.start() must be called before submit().")

        if len(pcm) % self._format.block_align != 0:
            raise AudioDeviceError(
                f"PCM payload length must be a multiple of {self._format.block_align} bytes."
            )

        try:
            self._stream.write(pcm)
            logger.debug("PlaybackEngine wrote %s bytes", len(pcm))
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            logger.error("Audio stream write failed: %s", exc)
            raise AudioDeviceError(str(exc)) from exc

    def flush_and_close(self) -> None:
        """Stop and close the underlying stream."""
        if self._stream is None:
            logger.debug("flush_and_close() called without an active stream.")
            return

        try:
            self._stream.stop()
            self._stream.close()
            logger.debug("PlaybackEngine stream closed.")
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            logger.error("Failed to close audio stream: %s", exc)
            raise AudioDeviceError(str(exc)) from exc
        finally:
            self._stream = None
            self._format = None
