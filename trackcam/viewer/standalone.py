"""
Standalone trackball demo window: draws the three world axes.
Usage: python -m trackcam.viewer.standalone [config.yaml]
"""
import sys

from PySide6.QtCore import QElapsedTimer, QPointF, Qt, QTimer
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QApplication, QMainWindow, QWidget

from trackcam.config import load_config
from trackcam.core.camera import TrackballCamera
from trackcam.core.config import DEFAULT_QUEUE_SIZE
from trackcam.core.events import EventQueue
from trackcam.core.logger import get_logger
from trackcam.viewer.qt_input import TrackballEventFilter

logger = get_logger("viewer")

AXES = (
    ((1.0, 0.0, 0.0), QColor(230, 60, 60)),
    ((0.0, 1.0, 0.0), QColor(60, 200, 60)),
    ((0.0, 0.0, 1.0), QColor(70, 110, 240)),
)
ORIGIN = (0.0, 0.0, 0.0)
FRAME_INTERVAL_MS = 16


class AxesView(QWidget):
    """
    QWidget host for a TrackballCamera. Input is queued by an event filter and
    drained once per timer tick; the widget repaints only when the camera changed.
    """

    def __init__(self, camera: TrackballCamera, queue_size: int = DEFAULT_QUEUE_SIZE, parent=None):
        super().__init__(parent)
        self.camera = camera
        self.queue = EventQueue(queue_size)
        self._filter = TrackballEventFilter(self.queue, self)
        self.installEventFilter(self._filter)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(320, 240)

        self._clock = QElapsedTimer()
        self._clock.start()
        self._timer = QTimer(self)
        self._timer.timeout.connect(self.tick)
        self._timer.start(FRAME_INTERVAL_MS)

    def tick(self) -> bool:
        """Apply queued input; schedule a repaint when the camera moved."""
        dt = self._clock.restart() / 1000.0
        changed = self.camera.update(self.queue.drain(), dt)
        if changed:
            self.update()
        return changed

    def segments(self) -> list:
        """Screen-space axis segments as (start, end, color); axes crossing the eye plane are skipped."""
        width, height = self.width(), self.height()
        origin = self.camera.project(ORIGIN)
        if origin is None:
            return []
        out = []
        for axis, color in AXES:
            tip = self.camera.project(axis)
            if tip is None:
                continue
            out.append((_to_pixels(origin, width, height), _to_pixels(tip, width, height), color))
        return out

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(38, 38, 38))
        for start, end, color in self.segments():
            painter.setPen(QPen(color, 2.0))
            painter.drawLine(start, end)
        painter.end()


def _to_pixels(ndc, width: int, height: int) -> QPointF:
    return QPointF((ndc[0] + 1.0) * 0.5 * width, (1.0 - ndc[1]) * 0.5 * height)


def main(config_path: str | None = None) -> int:
    config = load_config(override_path=config_path)
    camera = TrackballCamera.from_config(config)

    app = QApplication.instance() or QApplication(sys.argv)
    app.setApplicationName("TrackCam")
    view = AxesView(camera, int(config.get("queue_size") or DEFAULT_QUEUE_SIZE))
    window = QMainWindow()
    window.setWindowTitle("Coherent Virtual Trackball Camera Mode")
    window.setCentralWidget(view)
    width, height = (int(v) for v in camera.controller.viewport)
    window.resize(width, height)
    view.setFocus()
    window.show()
    logger.info("Viewer started (%dx%d)", width, height)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
