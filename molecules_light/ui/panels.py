"""
Panels for the pygame viewer (light source and target selectors, control dock).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

try:
    import pygame
except ImportError:  # pragma: no cover
    pygame = None  # type: ignore

Color = Tuple[int, int, int]


@dataclass
class SelectorPanel:
    """A titled column of buttons with one selected option."""

    rect: "pygame.Rect"
    font: "pygame.font.Font"
    title: str
    options: List[str]
    on_selected: Callable[[str], None]
    selected: Optional[str] = None
    button_height: int = 30
    button_margin: int = 6
    _button_rects: Dict[str, "pygame.Rect"] = field(default_factory=dict, init=False, repr=False)

    def render(self, surface: "pygame.Surface") -> None:
        if pygame is None:
            return
        pygame.draw.rect(surface, (20, 20, 40), self.rect)
        title = self.font.render(self.title, True, (200, 200, 210))
        surface.blit(title, (self.rect.x + 12, self.rect.y + 10))
        self._button_rects = {}
        y = self.rect.y + 40
        for option in self.options:
            rect = pygame.Rect(self.rect.x + 12, y, self.rect.width - 24, self.button_height)
            color = (90, 90, 130) if option == self.selected else (45, 45, 70)
            pygame.draw.rect(surface, color, rect, border_radius=6)
            label = self.font.render(option, True, (240, 240, 255))
            surface.blit(label, label.get_rect(center=rect.center))
            self._button_rects[option] = rect
            y += self.button_height + self.button_margin

    def handle_event(self, event: "pygame.event.Event") -> None:
        if pygame is None:
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and hasattr(event, "pos"):
            for option, rect in self._button_rects.items():
                if rect.collidepoint(event.pos):
                    self.selected = option
                    self.on_selected(option)
                    return


@dataclass
class ControlDockPanel:
    rect: "pygame.Rect"
    font: "pygame.font.Font"
    on_toggle_run: Callable[[], None]
    on_step: Callable[[], None]
    on_reset: Callable[[], None]
    on_toggle_emitter: Callable[[], None]
    on_toggle_slow: Callable[[], None]
    is_running: bool = True
    emitter_on: bool = False
    slow_motion: bool = False
    status_lines: List[str] = field(default_factory=list)
    _button_rects: Dict[str, "pygame.Rect"] = field(default_factory=dict, init=False, repr=False)

    def render(self, surface: "pygame.Surface") -> None:
        if pygame is None:
            return
        pygame.draw.rect(surface, (25, 25, 45), self.rect)
        button_labels = [
            ("run", "Pause" if self.is_running else "Play"),
            ("step", "Step"),
            ("emitter", "Emitter off" if self.emitter_on else "Emitter on"),
            ("slow", "Normal" if self.slow_motion else "Slow"),
            ("reset", "Reset"),
        ]
        self._button_rects = {}
        for idx, (key, label) in enumerate(button_labels):
            rect = pygame.Rect(self.rect.x + 16 + idx * 132, self.rect.y + 16, 120, 36)
            pygame.draw.rect(surface, (45, 45, 70), rect, border_radius=6)
            text_surface = self.font.render(label, True, (240, 240, 255))
            surface.blit(text_surface, text_surface.get_rect(center=rect.center))
            self._button_rects[key] = rect

        y = self.rect.y + 64
        for line in self.status_lines:
            text_surface = self.font.render(line, True, (180, 180, 190))
            surface.blit(text_surface, (self.rect.x + 16, y))
            y += 20

    def handle_event(self, event: "pygame.event.Event") -> None:
        if pygame is None:
            return
        if event.type != pygame.MOUSEBUTTONDOWN or event.button != 1 or not hasattr(event, "pos"):
            return
        actions = {
            "run": self.on_toggle_run,
            "step": self.on_step,
            "emitter": self.on_toggle_emitter,
            "slow": self.on_toggle_slow,
            "reset": self.on_reset,
        }
        for key, rect in self._button_rects.items():
            if rect.collidepoint(event.pos):
                actions[key]()
                return
