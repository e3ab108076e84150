"""Status indicators -- render the controller's tri-state status as images.

Each surface shows a single image and no text:

    error      -> "Cross"   (no rig found or rig lost)
    ready      -> "Arrow"   (a weapon is enabled and can fire)
    not-ready  -> "Danger"  (moving, or nothing available)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .selection import Status

STATUS_IMAGES: dict[Status, str] = {
    Status.ERROR: "Cross",
    Status.READY: "Arrow",
    Status.NOT_READY: "Danger",
}


@dataclass
class TextSurface:
    """An indicator panel: background, text, and a list of selected images."""
    name: str
    background: str = "black"
    text: str = ""
    images: list[str] = field(default_factory=list)

    def clear(self) -> None:
        self.text = ""
        self.images.clear()

    def show_image(self, image: str) -> None:
        self.clear()
        self.images.append(image)

    @property
    def image(self) -> str | None:
        return self.images[0] if self.images else None


class StatusBoard:
    """Mirrors controller status onto every attached surface.

    Usable directly as ``controller.on_status``.
    """

    def __init__(self, surfaces: list[TextSurface] | None = None) -> None:
        self.surfaces = surfaces if surfaces is not None else [
            TextSurface("main"), TextSurface("keyboard"),
        ]
        for surface in self.surfaces:
            surface.background = "black"
            surface.clear()
        self.status: Status | None = None

    def __call__(self, status: Status) -> None:
        self.show(status)

    def show(self, status: Status) -> None:
        image = STATUS_IMAGES[status]
        for surface in self.surfaces:
            surface.show_image(image)
        self.status = status

    @property
    def image(self) -> str | None:
        return STATUS_IMAGES.get(self.status) if self.status is not None else None
