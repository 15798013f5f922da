"""
Interactive window.

Keys (while running):
  Click   Disperse the wheel under the pointer and its color group
  Space   Bring back the most recent dispersal
  p       Play / pause (also the on-screen button)
  s       Save screenshot
  Esc     Quit
"""

import time
from pathlib import Path

import pygame
from PIL import Image

from fortunewheels.core.spectrum import SpectrumFrames
from fortunewheels.scene import Scene, SceneConfig
from fortunewheels.visualizers.wheels import WheelRenderer

BUTTON_SIZE = (110, 32)


class LiveApp:
    """Runs a Scene in a resizable window with optional music playback."""

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        config: SceneConfig | None = None,
        audio_path: Path | None = None,
        spectra: SpectrumFrames | None = None,
        seed: int | None = None,
        screenshot_dir: Path = Path("screenshots"),
    ):
        self.cfg = config or SceneConfig()
        self.fps = self.cfg.audio.fps
        self.scene = Scene(width, height, self.cfg, seed=seed)
        self.renderer = WheelRenderer(self.cfg.render)
        self.audio_path = audio_path
        self.spectra = spectra or SpectrumFrames.silent(self.cfg.audio.num_bins, self.fps)
        self.screenshot_dir = Path(screenshot_dir)

        self.playing = False
        self.running = True
        self.screen: pygame.Surface | None = None
        self._font: pygame.font.Font | None = None

    def button_rect(self) -> pygame.Rect:
        w, h = BUTTON_SIZE
        return pygame.Rect((self.scene.width - w) // 2, self.scene.height - h - 2, w, h)

    def toggle_playback(self):
        if self.audio_path is None:
            return
        if self.playing:
            pygame.mixer.music.stop()
        else:
            pygame.mixer.music.play(loops=-1)
        self.playing = not self.playing

    def playback_time(self) -> float:
        if not self.playing:
            return 0.0
        seconds = max(pygame.mixer.music.get_pos(), 0) / 1000.0
        if self.spectra.duration > 0:
            seconds %= self.spectra.duration
        return seconds

    def current_spectrum(self):
        if not self.playing:
            return self.spectra.silence()
        return self.spectra.at_time(self.playback_time())

    def save_screenshot(self, surface: pygame.Surface) -> Path:
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        path = self.screenshot_dir / f"wheels_{time.strftime('%Y%m%d_%H%M%S')}_{self.scene.frame}.png"
        Image.fromarray(self.renderer.surface_to_array(surface)).save(path)
        print(f"Saved screenshot: {path}")
        return path

    def handle_event(self, event: pygame.event.Event):
        """Route one input event to the scene."""
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if self.cfg.render.show_button and self.button_rect().collidepoint(event.pos):
                self.toggle_playback()
            else:
                self.scene.trigger(event.pos)
        elif event.type == pygame.KEYDOWN:
            if event.key == pygame.K_SPACE:
                self.scene.restore()
            elif event.key == pygame.K_p:
                self.toggle_playback()
            elif event.key == pygame.K_s and self.screen is not None:
                self.save_screenshot(self.screen)
            elif event.key == pygame.K_ESCAPE:
                self.running = False
        elif event.type == pygame.VIDEORESIZE:
            width, height = max(1, event.w), max(1, event.h)
            if self.screen is not None:
                self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)
            result = self.scene.resize(width, height)
            if result.exhausted:
                print(f"Placed {len(result.wheels)}/{result.target_count} wheels")

    def draw_button(self, surface: pygame.Surface):
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        rect = self.button_rect()
        pygame.draw.rect(surface, (240, 240, 240), rect, border_radius=4)
        pygame.draw.rect(surface, (60, 60, 60), rect, 1, border_radius=4)
        label = self._font.render("Play/Pause", True, (20, 20, 20))
        surface.blit(label, label.get_rect(center=rect.center))

    def frame(self):
        """One tick plus redraw."""
        self.scene.tick(self.current_spectrum())
        self.renderer.render_frame(self.scene, self.screen)
        if self.cfg.render.show_button:
            self.draw_button(self.screen)

    def run(self):
        pygame.init()
        pygame.display.set_caption("Fortune Wheels")
        self.screen = pygame.display.set_mode((self.scene.width, self.scene.height), pygame.RESIZABLE)
        if self.audio_path is not None:
            pygame.mixer.init()
            pygame.mixer.music.load(str(self.audio_path))

        clock = pygame.time.Clock()
        try:
            while self.running:
                for event in pygame.event.get():
                    self.handle_event(event)
                if not self.running:
                    break
                self.frame()
                pygame.display.flip()
                clock.tick(self.fps)
        finally:
            pygame.quit()
