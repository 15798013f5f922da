"""Video output."""

from fortunewheels.io.encoder import QUALITY_PRESETS, encode_video
