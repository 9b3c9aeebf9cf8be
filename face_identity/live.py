from typing import Optional

import cv2

from .camera import CameraStream
from .detector import HaarFaceDetector
from .display import draw_annotations
from .logger import setup_logger
from .pipeline import RecognitionPipeline


class LiveRecognition:
    window_name = "Live Face Recognition - Press Q to exit"

    def __init__(self, pipeline: RecognitionPipeline, detector: HaarFaceDetector):
        self.pipeline = pipeline
        self.detector = detector
        self.logger = setup_logger(self.__class__.__name__)

    def run(self, camera_index: Optional[int] = None) -> None:
        self.logger.info("Starting live face recognition")

        try:
            with CameraStream(camera_index) as cam:
                for frame in cam.frames():
                    rects = self.detector.detect(frame)
                    annotations = self.pipeline.process_frame(frame, rects)
                    for annotation in annotations:
                        if annotation.ok:
                            self.logger.debug(
                                "Face %s -> %s (%.1f)", annotation.rect, annotation.name, annotation.distance
                            )

                    draw_annotations(frame, annotations)
                    cv2.imshow(self.window_name, frame)

                    key = cv2.waitKey(1) & 0xFF
                    if key == ord("q"):
                        break
        finally:
            cv2.destroyAllWindows()
