"""
Main application for hand gesture recognition.
"""
import argparse
import asyncio
import logging
import time
from typing import Optional

import cv2

from .config import load_config, setup_logging
from .backend import create_backend
from .controller_mock import MockController, dispatch_action, dispatch_gesture
from .pipeline import FramePipeline
from .types import ActionGesture, Gesture

logger = logging.getLogger(__name__)


class GestureRecognitionApp:
    """Main application class for hand gesture recognition."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        setup_logging(self.config.logging)

        self.controller = MockController()
        self.loop: Optional[asyncio.AbstractEventLoop] = None

        backend = create_backend(self.config)
        self.pipeline = FramePipeline(
            backend,
            self.config,
            on_gesture_confirmed=self._on_gesture,
            on_action_confirmed=self._on_action,
        )

        # Initialize camera
        self.cap = cv2.VideoCapture(self.config.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.camera.fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {self.config.camera.index}")

    def _on_gesture(self, gesture: Gesture) -> None:
        # Called on the pipeline worker thread
        if self.loop is not None:
            asyncio.run_coroutine_threadsafe(dispatch_gesture(self.controller, gesture), self.loop)

    def _on_action(self, action: ActionGesture) -> None:
        if self.loop is not None:
            asyncio.run_coroutine_threadsafe(dispatch_action(self.controller, action), self.loop)

    def _status_text(self) -> str:
        gesture = self.pipeline.current_gesture
        action = self.pipeline.current_action
        if action is not ActionGesture.NONE:
            return f"Action: {action.label}"
        if gesture is not Gesture.NONE:
            return f"Gesture: {gesture.label} ({self.pipeline.confidence:.2f})"
        return "No gesture"

    async def run(self):
        """Run the main application loop."""
        self.loop = asyncio.get_running_loop()
        logger.info("Starting %s, press 'q' to quit", self.config.display.window_name)

        try:
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    logger.error("Failed to read frame from camera")
                    break

                # The worker reads the frame while we draw on this one
                self.pipeline.submit(frame.copy(), time.time())

                if self.config.display.show_status:
                    cv2.putText(frame, self._status_text(), (10, 30),
                                cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
                    cv2.putText(frame, "Press 'q' to quit", (10, frame.shape[0] - 20),
                                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

                cv2.imshow(self.config.display.window_name, frame)

                if cv2.waitKey(1) & 0xFF == ord('q'):
                    break

                # Let dispatched controller calls run
                await asyncio.sleep(0)
        finally:
            self.close()

    def close(self) -> None:
        """Release the camera, window and worker thread."""
        self.pipeline.close()
        stats = self.pipeline.stats
        logger.info(
            "Frames: submitted=%d processed=%d skipped=%d dropped=%d backend_errors=%d",
            stats.submitted, stats.processed, stats.skipped, stats.dropped, stats.backend_errors,
        )
        if self.cap.isOpened():
            self.cap.release()
        cv2.destroyAllWindows()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recognize hand gestures from a webcam.")
    parser.add_argument("--config", default=None, help="path to a YAML config file")
    return parser.parse_args(argv)


async def main(argv=None):
    """Entry point for the application."""
    args = parse_args(argv)
    app = GestureRecognitionApp(config_path=args.config)
    try:
        await app.run()
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
