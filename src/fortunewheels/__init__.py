"""
Fortune Wheels: an audio-reactive wheel composition with reversible dispersal.
"""

__version__ = "0.1.0"

from fortunewheels.scene import Scene, SceneConfig, load_config
